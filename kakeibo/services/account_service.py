"""Account lookups, balance updates and encrypted credential storage."""

import json

from sqlalchemy import select
from sqlalchemy.orm import Session

from kakeibo.core.db import Account
from kakeibo.core.errors import AccountNotFoundError, CredentialsNotFoundError
from kakeibo.core.models import AccountType, DecryptedCredentials
from kakeibo.services.encryption_service import EncryptedData, EncryptionService


class AccountService:
    """Service for account persistence and credential handling."""

    def __init__(self, session: Session, encryption_service: EncryptionService | None) -> None:
        """Initialize the AccountService with a session and an encryption capability."""
        self.session = session
        self.encryption_service = encryption_service

    def get_all(self) -> list[Account]:
        """Return every account in primary-key order."""
        return list(self.session.execute(select(Account).order_by(Account.id.asc())).scalars())

    def get_by_id(self, account_id: int) -> Account | None:
        """Return an account by id, or None."""
        return self.session.get(Account, account_id)

    def create(
        self,
        name: str,
        account_type: AccountType | str,
        credentials: DecryptedCredentials | None = None,
        initial_balance: int = 0,
    ) -> Account:
        """Create an account, encrypting its credentials when given."""
        trimmed = name.strip()
        if not trimmed:
            msg = "Name is required"
            raise ValueError(msg)
        account = Account(name=trimmed, type=AccountType(account_type).value, balance=initial_balance)
        if credentials is not None:
            self._store_credentials(account, credentials)
        self.session.add(account)
        self.session.commit()
        self.session.refresh(account)
        return account

    def update_credentials(self, account_id: int, credentials: DecryptedCredentials) -> Account:
        """Replace the stored credentials of an account."""
        account = self.get_by_id(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        self._store_credentials(account, credentials)
        self.session.commit()
        self.session.refresh(account)
        return account

    def update_balance(self, account_id: int, balance: int) -> None:
        """Overwrite an account's balance."""
        account = self.get_by_id(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        account.balance = balance
        self.session.commit()

    def get_credentials(self, account_id: int) -> DecryptedCredentials:
        """Decrypt and return the credentials stored for an account."""
        account = self.get_by_id(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        if not account.has_credentials:
            raise CredentialsNotFoundError(account_id)
        decrypted = self._require_encryption().decrypt(
            EncryptedData(
                ciphertext=account.encrypted_credentials,
                iv=account.credentials_iv,
                auth_tag=account.credentials_auth_tag,
            )
        )
        return DecryptedCredentials.model_validate(json.loads(decrypted))

    def _store_credentials(self, account: Account, credentials: DecryptedCredentials) -> None:
        encrypted = self._require_encryption().encrypt(credentials.model_dump_json())
        account.encrypted_credentials = encrypted.ciphertext
        account.credentials_iv = encrypted.iv
        account.credentials_auth_tag = encrypted.auth_tag

    def _require_encryption(self) -> EncryptionService:
        if self.encryption_service is None:
            msg = "Credential encryption is not configured (set MASTER_KEY)"
            raise RuntimeError(msg)
        return self.encryption_service
