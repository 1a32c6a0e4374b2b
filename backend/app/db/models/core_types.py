import enum

class Role(str, enum.Enum):
    admin = "admin"
    purchasing = "purchasing"
    stock_movement = "stock_movement"
    warehouse_validation = "warehouse_validation"

class POStatus(str, enum.Enum):
    pending = "PENDING"
    in_progress = "IN_PROGRESS"
    completed = "COMPLETED"
    cancelled = "CANCELLED"

class MovementType(str, enum.Enum):
    inbound = "IN"
    outbound = "OUT"
