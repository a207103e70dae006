from .repos import (
    CardsRepoPort,
    CompaniesRepoPort,
    CompanyDomainsRepoPort,
    ConferencesRepoPort,
    ContactsRepoPort,
    MeetingsRepoPort,
    NotesRepoPort,
    RecapsRepoPort,
    Repos,
    SessionsRepoPort,
)
from .collaborators import AuthVerifierPort, BlobStorePort, CardEnginePort, NoteEnginePort

__all__ = [
    "AuthVerifierPort",
    "BlobStorePort",
    "CardEnginePort",
    "NoteEnginePort",
    "CardsRepoPort",
    "CompaniesRepoPort",
    "CompanyDomainsRepoPort",
    "ConferencesRepoPort",
    "ContactsRepoPort",
    "MeetingsRepoPort",
    "NotesRepoPort",
    "RecapsRepoPort",
    "Repos",
    "SessionsRepoPort",
]
