from .record import Record, iso_utc, new_id, utc_now
from .contact import Contact
from .company import Company, CompanyDomain
from .note import Note, NoteStatus
from .card import BusinessCard, CardFields
from .meeting import Meeting, ContactMeeting
from .conference import Conference, ConferenceSession, ConferenceRecap

__all__ = [
    "Record",
    "new_id",
    "utc_now",
    "iso_utc",
    "Contact",
    "Company",
    "CompanyDomain",
    "Note",
    "NoteStatus",
    "BusinessCard",
    "CardFields",
    "Meeting",
    "ContactMeeting",
    "Conference",
    "ConferenceSession",
    "ConferenceRecap",
]
