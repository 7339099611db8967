"""Secret store: protocol, Secrets Manager implementation and in-memory double."""

from spaceauth_renewer.secret_store.memory import InMemorySecretStore
from spaceauth_renewer.secret_store.protocol import SecretStore
from spaceauth_renewer.secret_store.secrets_manager import SecretsManagerStore

__all__ = [
    "SecretStore",
    "InMemorySecretStore",
    "SecretsManagerStore",
]
