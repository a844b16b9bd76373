import enum


class SummaryStrategy(str, enum.Enum):
    SQL = "sql"
    MEMORY = "memory"
