# backend/utils/classifier.py
"""Plant disease classification used by the diagnostic endpoint."""
from pathlib import Path
from typing import List, NamedTuple


class Prediction(NamedTuple):
    disease: str
    confidence: float
    description: str
    treatment: List[str]


# Single answer returned until a trained model is plugged in
PLACEHOLDER_PREDICTION = Prediction(
    disease="Mildiou de la tomate",
    confidence=87.0,
    description=(
        "Le mildiou est une maladie fongique courante qui affecte les plants de tomates. "
        "Elle se caractérise par des taches brunes sur les feuilles et les fruits."
    ),
    treatment=[
        "Retirer les feuilles infectées immédiatement",
        "Appliquer un fongicide à base de cuivre",
        "Améliorer la circulation d'air autour des plants",
        "Éviter l'arrosage des feuilles",
        "Consulter un expert pour confirmation",
    ],
)

DEFAULT_ACCURACY = 87.0


class PlaceholderClassifier:
    """Returns the same prediction for every picture."""

    def predict(self, image_path: Path) -> Prediction:
        return PLACEHOLDER_PREDICTION


classifier = PlaceholderClassifier()

def get_classifier():
    return classifier
