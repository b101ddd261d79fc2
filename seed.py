# seed.py
from configs import db
from db.models.branch import Branch
from db.models.item import Item, ItemType
from dao.item import MACHINE_CATEGORY, MACHINE_SUBCATEGORY, generate_code
from app import create_app


# -------- Branches --------
def seed_branches():
    branches = [
        ("Main Street", "12 Main Street", "A. Perera", "011-2345678"),
        ("Lake Road", "48 Lake Road", "S. Fernando", "011-3456789"),
        ("Hill Side", "3 Hill Side Lane", "N. Silva", "011-4567890"),
    ]
    for name, address, manager, phone in branches:
        b = Branch.query.filter_by(name=name).first()
        if not b:
            db.session.add(Branch(name=name, address=address, manager=manager, phone=phone))
        else:
            b.address, b.manager, b.phone = address, manager, phone
    db.session.commit()
    print("✓ Branches seeded/updated")


# -------- Items --------
def seed_items():
    items = [
        # type, name, category, subcategory, price, sold_by_weight
        (ItemType.NORMAL, "Fish Bun", "Bakery", "Buns", 120, False),
        (ItemType.NORMAL, "Chicken Roll", "Bakery", "Short Eats", 150, False),
        (ItemType.NORMAL, "Butter Cake Slice", "Bakery", "Cakes", 200, False),
        (ItemType.GROCERY, "Basmati Rice", "Grocery", "Rice", 480, True),
        (ItemType.GROCERY, "Sugar", "Grocery", "Baking", 260, True),
        (ItemType.GROCERY, "Milk Packet", "Grocery", "Dairy", 180, False),
        (ItemType.MACHINE, "Espresso", MACHINE_CATEGORY, MACHINE_SUBCATEGORY, 350, False),
    ]
    for t, name, category, sub, price, by_weight in items:
        it = Item.query.filter_by(name=name, item_type=t).first()
        if not it:
            db.session.add(
                Item(
                    code=generate_code(),
                    item_type=t,
                    name=name,
                    category=category,
                    subcategory=sub,
                    price=price,
                    sold_by_weight=by_weight,
                )
            )
        else:
            it.category, it.subcategory, it.price = category, sub, price
            it.sold_by_weight = by_weight
    db.session.commit()
    print("✓ Items seeded/updated")


if __name__ == "__main__":
    app = create_app()
    with app.app_context():
        seed_branches()
        seed_items()
        print("✅ Seeded branches & items")
