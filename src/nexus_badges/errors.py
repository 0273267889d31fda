"""
Error kinds raised by the sync and provisioning engine.

Every error the CLI knows how to report derives from NexusBadgesError.
MissingConfig messages always name the command that fixes them.
"""

from __future__ import annotations

from typing import Optional


class NexusBadgesError(Exception):
    """Base class for every nexus-badges failure."""


class MissingConfig(NexusBadgesError):
    """A required setup step has not been completed."""


class NotSetup(NexusBadgesError):
    """A dependent remote resource has never been created."""


class BadResponse(NexusBadgesError):
    """A remote API answered with an unexpected status.

    Carries the raw response body for diagnosis.
    """

    def __init__(self, body: str, status: Optional[int] = None):
        self.status = status
        self.body = body
        if status is None:
            super().__init__(body)
        else:
            super().__init__(f"Unexpected response ({status}): {body}")


class TransportError(NexusBadgesError):
    """Network, DNS, TLS or timeout failure."""


class DecodeError(NexusBadgesError):
    """A JSON document or payload could not be decoded."""


class InvalidKey(NexusBadgesError):
    """The repository public key is malformed."""


class EncryptError(NexusBadgesError):
    """Sealing a secret against the repository key failed."""


class DuplicateIdentity(NexusBadgesError):
    """Two tracked mods resolved to the same Nexus mod."""


class RegistryError(NexusBadgesError):
    """A tracked mod could not be added or removed."""


class UnsupportedCommand(NexusBadgesError):
    """The command cannot run in the current execution mode."""


class ProvisioningError(NexusBadgesError):
    """One or more independent provisioning steps failed.

    Attributes:
        failures: Mapping of step name to the error it raised.
    """

    def __init__(self, failures: dict[str, BaseException]):
        self.failures = failures
        names = ", ".join(failures)
        super().__init__(f"{len(failures)} provisioning step(s) failed: {names}")
