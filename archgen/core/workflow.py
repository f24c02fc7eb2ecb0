from enum import Enum

class GenerationStage(str, Enum):
    VALIDATE = "VALIDATE"
    DOMAIN = "DOMAIN"
    APPLICATION = "APPLICATION"
    INFRASTRUCTURE = "INFRASTRUCTURE"
    API = "API"
    TESTS = "TESTS"
    COMMON = "COMMON"
    INCREMENTAL = "INCREMENTAL"
    WRITE = "WRITE"
    DONE = "DONE"
