import os
import sys
import random

# Add 'backend' folder to Python path
sys.path.append(os.path.abspath(os.path.dirname(__file__)))

# Database models and setup
from database import SessionLocal, init_db
from models.users import User, FARMER, BUYER, ADMIN
from models.product import Product
from models.diagnostic import Disease
from utils.classifier import PLACEHOLDER_PREDICTION
from utils.hashing import get_password_hash
from utils.weather_client import REGION_COORDINATES

# Configuration
DEMO_PASSWORD = "demo1234"
PRODUCTS_PER_FARMER = 4
# End Configuration

FARMERS = [
    ("Mohamed Ould Ahmed", "Trarza", "Rosso"),
    ("Aminata Sy", "Gorgol", "Kaédi"),
    ("Sidi Mohamed Ould Cheikh", "Brakna", "Boghé"),
    ("Mariem Mint Sidi", "Guidimaka", "Sélibaby"),
    ("Oumar Ba", "Nouakchott", "Toujounine"),
]

CATALOGUE = [
    ("Tomates", "Légumes", 40.0),
    ("Oignons", "Légumes", 30.0),
    ("Carottes", "Légumes", 35.0),
    ("Aubergines", "Légumes", 45.0),
    ("Pastèques", "Fruits", 25.0),
    ("Dattes", "Fruits", 120.0),
    ("Mangues", "Fruits", 80.0),
    ("Riz paddy", "Céréales", 22.0),
    ("Sorgho", "Céréales", 18.0),
    ("Mil", "Céréales", 20.0),
    ("Gomme arabique", "Autres", 150.0),
]

DISEASES = [
    (PLACEHOLDER_PREDICTION.disease, PLACEHOLDER_PREDICTION.description, list(PLACEHOLDER_PREDICTION.treatment)),
    (
        "Oïdium",
        "Feutrage blanc poudreux sur les feuilles, fréquent par temps chaud et sec.",
        ["Supprimer les feuilles atteintes", "Traiter au soufre", "Espacer les plants"],
    ),
    (
        "Rouille",
        "Pustules orangées sur la face inférieure des feuilles.",
        ["Brûler les débris végétaux", "Appliquer un fongicide adapté", "Pratiquer la rotation des cultures"],
    ),
]


def get_or_create_user(session, email, **fields):
    user = session.query(User).filter(User.email == email).first()
    if user:
        return user, False
    user = User(email=email, password_hash=get_password_hash(DEMO_PASSWORD), **fields)
    session.add(user)
    session.flush()
    return user, True


def seed_users(session):
    """Creates the admin, a demo buyer and the demo farmers."""
    get_or_create_user(session, "admin@agrimarket.mr", role=ADMIN, name="Administrateur")
    get_or_create_user(session, "acheteur@agrimarket.mr", role=BUYER, name="Khadijetou Mint Mohamed", region="Nouakchott")

    farmers = []
    for idx, (name, region, town) in enumerate(FARMERS, start=1):
        lat, lng = REGION_COORDINATES[region]
        farmer, created = get_or_create_user(
            session,
            f"agriculteur{idx}@agrimarket.mr",
            role=FARMER,
            name=name,
            phone=f"+222 4{idx}00 00{idx:02d}",
            region=region,
            location=town,
            lat=lat,
            lng=lng,
            rating=round(random.uniform(3.5, 5.0), 1),
        )
        farmers.append((farmer, created))
    return farmers


def seed_products(session, farmers):
    inserted = 0
    for farmer, created in farmers:
        if not created:
            continue
        for name, category, base_price in random.sample(CATALOGUE, PRODUCTS_PER_FARMER):
            session.add(Product(
                farmer_id=farmer.id,
                name=name,
                category=category,
                description=f"{name} de {farmer.location}, récolte locale.",
                price=round(base_price * random.uniform(0.8, 1.2), 2),
                unit="kg",
                quantity=random.randint(20, 500),
                rating=round(random.uniform(3.0, 5.0), 1),
            ))
            inserted += 1
    return inserted


def seed_diseases(session):
    inserted = 0
    for name, description, treatment in DISEASES:
        if session.query(Disease).filter(Disease.name == name).first():
            continue
        session.add(Disease(name=name, description=description, treatment=treatment))
        inserted += 1
    return inserted


def populate_database():
    """Main execution function to populate database with demo data."""
    init_db()
    session = SessionLocal()
    try:
        farmers = seed_users(session)
        products = seed_products(session, farmers)
        diseases = seed_diseases(session)
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

    print(f"Seed done: {len(farmers)} farmers, {products} new products, {diseases} new diseases.")
    print(f"Demo accounts use the password '{DEMO_PASSWORD}'.")


if __name__ == "__main__":
    populate_database()
