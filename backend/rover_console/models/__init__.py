from rover_console.models.alert import AlertRecord
from rover_console.models.person import Person

__all__ = ["AlertRecord", "Person"]
