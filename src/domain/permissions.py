from enum import Enum


class AdminPermission(str, Enum):
    WRITE = "WRITE"
    DELETE = "DELETE"
