import random


def get_seeded_rng(seed: int) -> random.Random:
    """Returns a new random.Random instance seeded with the given integer."""
    return random.Random(seed)


def roll(rng: random.Random, chance: float) -> bool:
    """True with probability ``chance``; 0 never fires and 1 always does."""
    if chance <= 0.0:
        return False
    if chance >= 1.0:
        return True
    return rng.random() < chance
