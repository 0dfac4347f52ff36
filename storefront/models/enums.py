from enum import Enum


class Gender(str, Enum):
    MEN = "men"
    WOMEN = "women"
    BOY = "boy"
    GIRL = "girl"


class Occasion(str, Enum):
    CASUAL = "casual"
    BUSINESS = "business"
    FORMAL = "formal"
    SPORT = "sport"
    PARTY = "party"
    TRAVEL = "travel"
