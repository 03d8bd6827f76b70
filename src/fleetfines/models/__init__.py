"""Data models for fleet records."""

from fleetfines.models._base import Blob, CandidateModel, FleetBaseModel, Money, Points
from fleetfines.models.candidates import (
    CANDIDATE_MODELS,
    CandidateKind,
    DriverCandidate,
    FineCandidate,
    InfractionCodeCandidate,
    VehicleCandidate,
)
from fleetfines.models.driver import Driver
from fleetfines.models.fine import Fine, FineDraft, PaymentStatus
from fleetfines.models.infraction import InfractionCode
from fleetfines.models.user import User
from fleetfines.models.vehicle import Vehicle

__all__ = [
    "Blob",
    "CANDIDATE_MODELS",
    "CandidateKind",
    "CandidateModel",
    "Driver",
    "DriverCandidate",
    "Fine",
    "FineCandidate",
    "FineDraft",
    "FleetBaseModel",
    "InfractionCode",
    "InfractionCodeCandidate",
    "Money",
    "PaymentStatus",
    "Points",
    "User",
    "Vehicle",
    "VehicleCandidate",
]
