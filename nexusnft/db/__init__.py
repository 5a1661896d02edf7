from nexusnft.db.database import get_session, init_db
from nexusnft.db.operations import (
    collection_to_model,
    count_tokens_owned,
    create_collection,
    create_token,
    get_collection,
    get_events,
    get_operator_approval,
    get_token,
    get_transaction,
    record_transaction,
    token_to_model,
    transaction_to_receipt,
    upsert_operator_approval,
)

__all__ = [
    "collection_to_model",
    "count_tokens_owned",
    "create_collection",
    "create_token",
    "get_collection",
    "get_events",
    "get_operator_approval",
    "get_session",
    "get_token",
    "get_transaction",
    "init_db",
    "record_transaction",
    "token_to_model",
    "transaction_to_receipt",
    "upsert_operator_approval",
]
