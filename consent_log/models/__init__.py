from .consent_record import ConsentRecord, ConsentStatus, status_label

__all__ = [
    "ConsentRecord",
    "ConsentStatus",
    "status_label",
]
