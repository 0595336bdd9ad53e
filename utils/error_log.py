import logging, traceback
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from models.models import ErrorLog

logger = logging.getLogger("error_log")

def log_error(db: Session, action: str, error: BaseException | str, user_id: int | None = None,
              details: str | None = None) -> None:
    """
    Record a failed operation in error_logs and the application log.
    `error` may be an exception (its traceback is stored) or a plain message.
    A failure to store the row is logged, never raised over the original error.
    """
    if isinstance(error, BaseException):
        message = str(error) or error.__class__.__name__
        stack = details or "".join(traceback.format_exception(type(error), error, error.__traceback__))
    else:
        message = error
        stack = details
    logger.error("[%s] %s", action, message)
    try:
        db.rollback()
        db.add(ErrorLog(user_id=user_id, action=action, error_message=message, stack_trace=stack))
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Could not persist error log for %s: %s", action, e)
