# model/auth.py
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Actor:
    id: str
    email: str = ""


class LocalIdentity:
    """
    "Current actor or none". Sign-in itself belongs to the external identity
    provider; this only remembers who it handed back.
    """

    def __init__(self, actor: Optional[Actor] = None):
        self._actor = actor

    def current_actor(self):
        return self._actor

    def sign_in(self, actor):
        self._actor = actor
        return actor

    def sign_out(self):
        self._actor = None
