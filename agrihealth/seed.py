"""Built-in disease catalog and the `agrihealth-seed` command."""
import argparse
import logging
from typing import Dict

from sqlalchemy.orm import Session

from . import models
from .database import Base, SessionLocal, engine

logger = logging.getLogger(__name__)


def get_plant_diseases():
    return [
        {
            "name": "Late Blight",
            "plant_type": "tomato",
            "description": "Late blight is a potentially serious disease of potato and tomato, caused by the fungus-like organism Phytophthora infestans.",
            "symptoms": [
                "Dark brown spots on leaves",
                "White fungal growth on undersides of leaves",
                "Brown lesions on stems",
                "Fruit rot with greasy appearance",
            ],
            "causes": "The disease is caused by the oomycete pathogen Phytophthora infestans. It thrives in cool, wet conditions.",
            "prevention_methods": ["Use resistant varieties", "Provide good air circulation", "Avoid overhead irrigation", "Rotate crops"],
            "treatment_methods": ["Apply fungicides preventatively", "Remove and destroy infected plants", "Copper-based sprays can help"],
            "optimal_temperature": "10-20°C",
            "severity": "high",
        },
        {
            "name": "Powdery Mildew",
            "plant_type": "cucumber",
            "description": "Powdery mildew is a fungal disease that affects a wide range of plants, particularly cucurbits.",
            "symptoms": ["White powdery spots on leaves and stems", "Yellow leaves", "Distorted leaves", "Premature leaf drop"],
            "causes": "The disease is caused by several species of fungi. High humidity and moderate temperatures favor development.",
            "prevention_methods": ["Plant resistant varieties", "Ensure proper spacing for air circulation", "Avoid overhead watering", "Remove plant debris"],
            "treatment_methods": ["Apply fungicides", "Use neem oil or potassium bicarbonate", "Remove and destroy infected parts"],
            "optimal_temperature": "18-30°C",
            "severity": "medium",
        },
        {
            "name": "Anthracnose",
            "plant_type": "mango",
            "description": "Anthracnose is a common disease of mangoes affecting leaves, flowers, and fruit.",
            "symptoms": ["Dark, sunken lesions on fruit", "Black spots on leaves", "Flower blight", "Twig dieback"],
            "causes": "The disease is caused by Colletotrichum gloeosporioides fungus. Warm, wet conditions favor development.",
            "prevention_methods": ["Prune trees for better air circulation", "Remove fallen debris", "Apply preventative fungicides", "Harvest fruit at proper maturity"],
            "treatment_methods": ["Apply copper-based fungicides", "Postharvest hot water treatment", "Careful handling to avoid wounds"],
            "optimal_temperature": "25-30°C",
            "severity": "medium",
        },
        {
            "name": "Bacterial Leaf Blight",
            "plant_type": "rice",
            "description": "Bacterial leaf blight is a serious disease of rice caused by Xanthomonas oryzae.",
            "symptoms": ["Water-soaked lesions on leaf edges", "Lesions turning yellow to white", "Wilting of leaves", "Dried leaves"],
            "causes": "The disease is caused by the bacterium Xanthomonas oryzae pv. oryzae. High humidity and high temperatures favor development.",
            "prevention_methods": ["Use resistant varieties", "Proper field drainage", "Balanced fertilization", "Proper spacing"],
            "treatment_methods": ["Application of copper-based bactericides", "Drain fields to reduce humidity", "Remove and destroy infected plants"],
            "optimal_temperature": "25-34°C",
            "severity": "high",
        },
        {
            "name": "Corn Rust",
            "plant_type": "corn",
            "description": "Corn rust is a fungal disease that affects corn production worldwide.",
            "symptoms": ["Orange-brown pustules on leaves", "Pustules turn dark brown-black", "Severe infections cause leaf death", "Reduced grain yield"],
            "causes": "The disease is caused by Puccinia sorghi or Puccinia polysora fungi. Warm, humid conditions favor development.",
            "prevention_methods": ["Plant resistant hybrids", "Crop rotation", "Early planting", "Destroy volunteer corn"],
            "treatment_methods": ["Apply fungicides", "Improve air circulation", "Proper plant nutrition"],
            "optimal_temperature": "16-25°C",
            "severity": "medium",
        },
    ]


def get_livestock_diseases():
    return [
        {
            "name": "Foot and Mouth Disease",
            "animal_type": "cattle",
            "description": "Foot and mouth disease (FMD) is a highly contagious viral disease affecting cloven-hoofed animals.",
            "symptoms": ["Fever", "Blisters on mouth and feet", "Excessive salivation", "Lameness", "Reduced milk production"],
            "causes": "The disease is caused by the foot-and-mouth disease virus (FMDV). Highly contagious through direct and indirect contact.",
            "prevention_methods": ["Vaccination", "Biosecurity measures", "Movement restrictions", "Quarantine new animals"],
            "treatment_methods": ["No specific treatment", "Supportive care", "Anti-inflammatory medication", "Rest and soft food"],
            "temperature_factors": "Fever (104-106°F/40-41°C) is an early sign. Temperature monitoring is essential for early detection.",
            "ideal_temperature": [38.5, 39.5],
            "zoonotic": False,
            "severity": "high",
            "incubation_period": "2-14 days",
        },
        {
            "name": "Avian Influenza",
            "animal_type": "poultry",
            "description": "Avian influenza is a highly contagious viral infection affecting birds, especially poultry.",
            "symptoms": ["Sudden death", "Lack of energy and appetite", "Decreased egg production", "Swelling of head and comb", "Respiratory distress"],
            "causes": "The disease is caused by Influenza A viruses. Spreads through direct contact with infected birds or contaminated surfaces.",
            "prevention_methods": ["Biosecurity measures", "Isolation of new birds", "Limiting contact with wild birds", "Regular cleaning and disinfection"],
            "treatment_methods": ["No specific treatment", "Culling of infected flocks", "Supportive care for valuable birds"],
            "temperature_factors": "Birds may show elevated body temperature. Virus survives better in cooler temperatures.",
            "ideal_temperature": [40.6, 41.7],
            "zoonotic": True,
            "severity": "high",
            "incubation_period": "3-7 days",
        },
        {
            "name": "Mastitis",
            "animal_type": "dairy cow",
            "description": "Mastitis is an inflammation of the mammary gland and udder tissue in dairy animals.",
            "symptoms": ["Swollen udder", "Pain and discomfort", "Abnormal milk (clots, watery)", "Reduced milk production", "Fever"],
            "causes": "The disease is commonly caused by bacterial infections (Staphylococcus, Streptococcus, E. coli). Poor milking hygiene and injured teats increase risk.",
            "prevention_methods": ["Good milking hygiene", "Proper milking technique", "Clean housing", "Teat dipping after milking"],
            "treatment_methods": ["Antibiotics (intramammary or systemic)", "Anti-inflammatory drugs", "Frequent milking of affected quarters", "Supportive care"],
            "temperature_factors": "Mild to moderate fever (39-40°C) may be present. Higher environmental temperatures can increase stress and susceptibility.",
            "ideal_temperature": [38.5, 39.0],
            "zoonotic": False,
            "severity": "medium",
            "incubation_period": "1-3 days",
        },
        {
            "name": "African Swine Fever",
            "animal_type": "pig",
            "description": "African swine fever (ASF) is a highly contagious viral disease affecting domestic and wild pigs.",
            "symptoms": ["High fever", "Loss of appetite", "Hemorrhages in skin and internal organs", "Vomiting and diarrhea", "Sudden death"],
            "causes": "The disease is caused by the African swine fever virus (ASFV). Spreads through direct contact, vectors (ticks), or contaminated feed.",
            "prevention_methods": ["Strict biosecurity measures", "Proper disposal of dead pigs", "Control of tick vectors", "Movement restrictions"],
            "treatment_methods": ["No treatment available", "Infected pigs must be culled", "Area disinfection"],
            "temperature_factors": "High fever (40.5-42°C) is a characteristic sign. Monitoring temperature can help with early detection.",
            "ideal_temperature": [38.0, 39.0],
            "zoonotic": False,
            "severity": "high",
            "incubation_period": "5-15 days",
        },
        {
            "name": "Bluetongue",
            "animal_type": "sheep",
            "description": "Bluetongue is a non-contagious, insect-borne viral disease affecting sheep and occasionally cattle and goats.",
            "symptoms": ["Fever", "Swelling of the face and tongue", "Blue discoloration of the tongue", "Nasal discharge and drooling", "Lameness"],
            "causes": "The disease is caused by the bluetongue virus, transmitted by Culicoides biting midges.",
            "prevention_methods": ["Vaccination in endemic areas", "Control of insect vectors", "Housing animals during peak vector activity", "Insect repellents"],
            "treatment_methods": ["No specific treatment", "Supportive care", "Anti-inflammatory drugs", "Soft food and water"],
            "temperature_factors": "Fever (40-42°C) often precedes other clinical signs. Temperature monitoring is important for early detection.",
            "ideal_temperature": [38.5, 39.5],
            "zoonotic": False,
            "severity": "medium",
            "incubation_period": "7-10 days",
        },
    ]


def seed_catalog(db: Session, reset: bool = False) -> Dict[str, int]:
    """Insert the built-in catalog. Existing entries are kept unless `reset`."""
    if reset:
        db.query(models.PlantDisease).delete()
        db.query(models.LivestockDisease).delete()
        db.commit()

    counts = {"plant": 0, "livestock": 0}
    if db.query(models.PlantDisease).count() == 0:
        db.add_all(models.PlantDisease(**row) for row in get_plant_diseases())
        counts["plant"] = len(get_plant_diseases())
    if db.query(models.LivestockDisease).count() == 0:
        db.add_all(models.LivestockDisease(**row) for row in get_livestock_diseases())
        counts["livestock"] = len(get_livestock_diseases())
    db.commit()
    logger.info("Seeded %d plant and %d livestock diseases", counts["plant"], counts["livestock"])
    return counts


def main(argv=None):
    parser = argparse.ArgumentParser(description="Seed the AgriHealth disease catalog")
    parser.add_argument("--reset", action="store_true", help="delete existing catalog entries first")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        counts = seed_catalog(db, reset=args.reset)
    finally:
        db.close()
    print(f"{counts['plant']} plant diseases added")
    print(f"{counts['livestock']} livestock diseases added")


if __name__ == "__main__":
    main()
