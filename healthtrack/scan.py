from __future__ import annotations

import random
from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class RecognizedFood:
    food_name: str
    calories: int


# Placeholder recognizer: there is no model behind this, it just picks one.
FOOD_TABLE: tuple[RecognizedFood, ...] = (
    RecognizedFood("Pasta", 300),
    RecognizedFood("Grilled Chicken", 250),
    RecognizedFood("Caesar Salad", 180),
    RecognizedFood("Pizza Slice", 285),
    RecognizedFood("Fruit Bowl", 120),
    RecognizedFood("Salmon Fillet", 350),
    RecognizedFood("Rice Bowl", 220),
    RecognizedFood("Veggie Wrap", 200),
)


def recognize_food(rng: random.Random | None = None) -> dict:
    choice = (rng or random).choice(FOOD_TABLE)
    return asdict(choice)
