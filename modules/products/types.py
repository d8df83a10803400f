from enum import Enum


class ProductType(str, Enum):
    RAW_MATERIAL = "raw_material"
    SUBASSEMBLY = "subassembly"
    FINISHED_GOOD = "finished_good"
