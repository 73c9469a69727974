import logging
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from surveyhub.core.exceptions import TransientStoreError

logger = logging.getLogger(__name__)


class StoreConflict(Exception):
    """Commit failed on a uniqueness race or a store timeout; safe to retry."""

    def __init__(self, cause: Exception):
        super().__init__(str(cause))
        self.cause = cause


class UnitOfWork:
    """
    Transaction boundary around a SQLAlchemy session.

    Pending adds/updates are applied atomically by ``commit()``. Any failure
    rolls the whole batch back. Integrity and operational errors are raised
    as ``StoreConflict`` so callers can re-read and retry.
    """

    def __init__(self, db: Session):
        self.db = db

    def commit(self):
        try:
            self.db.commit()
        except (IntegrityError, OperationalError) as e:
            self.db.rollback()
            logger.warning(f"Commit conflict, transaction rolled back: {e.__class__.__name__}")
            raise StoreConflict(e) from e
        except Exception:
            self.db.rollback()
            raise

    def rollback(self):
        self.db.rollback()

    def run(self, work, attempts: int = 1):
        """
        Run ``work()`` then commit, retrying ``attempts`` extra times on a
        store conflict. Each retry starts from a rolled back, expired session
        so ``work`` re-reads current rows.
        """
        last_error = None
        for attempt in range(attempts + 1):
            try:
                result = work()
                self.commit()
                return result
            except StoreConflict as e:
                last_error = e.cause
            except (IntegrityError, OperationalError) as e:
                self.db.rollback()
                last_error = e
            except Exception:
                self.db.rollback()
                raise
            self.db.expire_all()
            if attempt < attempts:
                logger.warning(f"Retrying transaction after store conflict (attempt {attempt + 2} of {attempts + 1})")
        raise TransientStoreError("The store rejected the transaction, please retry", cause=last_error)
