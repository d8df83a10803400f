from enum import Enum


class MovementType(str, Enum):
    IN = "in"
    OUT = "out"


class ReferenceType(str, Enum):
    MANUAL = "manual"
    ADJUSTMENT = "adjustment"
    PROJECT = "project"
    SALE = "sale"
    PURCHASE = "purchase"
