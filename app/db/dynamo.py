import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

import boto3
from boto3.dynamodb.conditions import Attr, Key
from boto3.dynamodb.types import TypeSerializer
from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import Settings
from app.core.errors import Conflict, InternalError
from app.models.expense import ExpenseInDB, UpdateResult
from app.models.insight import InsightInDB
from app.models.user import UserInDB

logger = logging.getLogger(__name__)

_serializer = TypeSerializer()


class DynamoDatabase:
    """
    Long-lived DynamoDB handle shared by every request.

    Created once in the application lifespan and closed on shutdown; the
    stores below only ever see the table objects it hands out.
    """

    def __init__(self, region: str, users_table: str, expenses_table: str, insights_table: str,
                 endpoint_url: Optional[str] = None):
        self.resource = boto3.resource("dynamodb", region_name=region, endpoint_url=endpoint_url)
        self.users_table = self.resource.Table(users_table)
        self.expenses_table = self.resource.Table(expenses_table)
        self.insights_table = self.resource.Table(insights_table)

    @classmethod
    def from_settings(cls, settings: Settings) -> "DynamoDatabase":
        return cls(
            region=settings.DYNAMO_REGION,
            users_table=settings.DYNAMO_USERS_TABLE,
            expenses_table=settings.DYNAMO_EXPENSES_TABLE,
            insights_table=settings.DYNAMO_INSIGHTS_TABLE,
            endpoint_url=settings.DYNAMO_ENDPOINT_URL,
        )

    def table_status(self) -> Dict[str, Dict[str, str]]:
        tables = {}
        for label, table in (("users", self.users_table), ("expenses", self.expenses_table),
                             ("insights", self.insights_table)):
            try:
                table.scan(Limit=1)
                tables[label] = {"name": table.name, "status": "accessible"}
            except (ClientError, BotoCoreError) as e:
                logger.error(f"DynamoDB check failed for {table.name}: {str(e)}")
                tables[label] = {"name": table.name, "status": "error", "error": str(e)}
        return tables

    def close(self) -> None:
        self.resource.meta.client.close()


class UserStore:
    def __init__(self, table):
        self.table = table

    def get_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """Query the users table by email through the `email-index` GSI."""
        try:
            response = self.table.query(
                IndexName="email-index",
                KeyConditionExpression=Key("email").eq(email),
                Limit=1,
            )
        except ClientError as e:
            raise _internal("get_user_by_email", e)
        items = response.get("Items", [])
        return _from_dynamo(items[0]) if items else None

    def get_by_id(self, user_id: str) -> Optional[Dict[str, Any]]:
        try:
            response = self.table.get_item(Key={"user_id": user_id})
        except ClientError as e:
            raise _internal("get_user_by_id", e)
        item = response.get("Item")
        return _from_dynamo(item) if item else None

    def create(self, user: UserInDB) -> None:
        """
        Insert the user together with an `EMAIL#<email>` guard item.

        Both writes go through one transaction conditioned on neither key
        existing, so a second account for the same email is never stored.
        """
        guard = {"user_id": email_guard_key(user.email), "owner_id": user.user_id}
        try:
            self.table.meta.client.transact_write_items(
                TransactItems=[
                    self._conditional_put(_convert_for_dynamo(user.model_dump())),
                    self._conditional_put(guard),
                ]
            )
        except ClientError as e:
            if _error_code(e) == "TransactionCanceledException" and any(
                reason.get("Code") == "ConditionalCheckFailed"
                for reason in e.response.get("CancellationReasons", [])
            ):
                raise Conflict("Email already registered")
            raise _internal("put_user", e)

    def _conditional_put(self, item: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "Put": {
                "TableName": self.table.name,
                "Item": {k: _serializer.serialize(v) for k, v in item.items()},
                "ConditionExpression": "attribute_not_exists(user_id)",
            }
        }


def email_guard_key(email: str) -> str:
    return f"EMAIL#{email}"


class ExpenseStore:
    def __init__(self, table):
        self.table = table

    def list_for_user(self, user_id: str) -> List[Dict[str, Any]]:
        """All of a user's expenses, oldest first (sort key order)."""
        return self._query(user_id)

    def recent_for_user(self, user_id: str, limit: int) -> List[Dict[str, Any]]:
        """The `limit` most recently created expenses, newest first."""
        return self._query(user_id, newest_first=True, limit=limit)

    def put(self, expense: ExpenseInDB) -> None:
        try:
            self.table.put_item(Item=_convert_for_dynamo(expense.model_dump()))
        except ClientError as e:
            raise _internal("put_expense", e)

    def update(self, user_id: str, expense_id: str, amount: float, category: str, description: str,
               updated_at: str) -> UpdateResult:
        """
        Overwrite the mutable fields of one expense.

        The key includes the owner, so an id belonging to someone else never
        matches. A missing match is reported through the counts, not raised.
        """
        try:
            self.table.update_item(
                Key={"user_id": user_id, "expense_id": expense_id},
                UpdateExpression="SET #amount = :amount, #category = :category, "
                                 "#description = :description, #updated_at = :updated_at",
                ExpressionAttributeNames={
                    "#amount": "amount",
                    "#category": "category",
                    "#description": "description",
                    "#updated_at": "updated_at",
                },
                ExpressionAttributeValues=_convert_for_dynamo({
                    ":amount": amount,
                    ":category": category,
                    ":description": description,
                    ":updated_at": updated_at,
                }),
                # update_item upserts by default
                ConditionExpression=Attr("expense_id").exists(),
            )
        except ClientError as e:
            if _error_code(e) == "ConditionalCheckFailedException":
                return UpdateResult(matched_count=0, modified_count=0)
            raise _internal("update_expense", e)
        return UpdateResult(matched_count=1, modified_count=1)

    def delete(self, user_id: str, expense_id: str) -> bool:
        try:
            response = self.table.delete_item(
                Key={"user_id": user_id, "expense_id": expense_id},
                ReturnValues="ALL_OLD",
            )
        except ClientError as e:
            raise _internal("delete_expense", e)
        return "Attributes" in response

    def _query(self, user_id: str, newest_first: bool = False, limit: Optional[int] = None):
        items: List[Dict[str, Any]] = []
        kwargs = {
            "KeyConditionExpression": Key("user_id").eq(user_id),
            "ScanIndexForward": not newest_first,
        }
        while True:
            if limit is not None:
                kwargs["Limit"] = limit - len(items)
            try:
                response = self.table.query(**kwargs)
            except ClientError as e:
                raise _internal("get_expenses_for_user", e)
            items.extend(_from_dynamo(item) for item in response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key or (limit is not None and len(items) >= limit):
                break
            kwargs["ExclusiveStartKey"] = last_key
        return items


class InsightStore:
    def __init__(self, table):
        self.table = table

    def save(self, insight: InsightInDB) -> None:
        try:
            self.table.put_item(Item=insight.model_dump(mode="json"))
        except ClientError as e:
            raise _internal("put_insight", e)

    def list_for_user(self, user_id: str) -> List[InsightInDB]:
        try:
            response = self.table.query(KeyConditionExpression=Key("user_id").eq(user_id))
        except ClientError as e:
            raise _internal("get_insights_for_user", e)
        insights = [InsightInDB(**item) for item in response.get("Items", [])]
        return sorted(insights, key=lambda insight: insight.generated_at, reverse=True)


def _error_code(e: ClientError) -> str:
    return e.response.get("Error", {}).get("Code", "Unknown")


def _error_message(e: ClientError) -> str:
    return e.response.get("Error", {}).get("Message", str(e))


def _internal(operation: str, e: ClientError) -> InternalError:
    message = _error_message(e)
    logger.error(f"{operation} failed: {message}")
    return InternalError(detail=f"{operation}: {message}")


def _convert_for_dynamo(obj: Any):
    """
    Recursively convert floats to Decimal for DynamoDB compatibility.
    """
    if isinstance(obj, float):
        return Decimal(str(obj))
    if isinstance(obj, dict):
        return {k: _convert_for_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_convert_for_dynamo(v) for v in obj]
    return obj


def _from_dynamo(obj: Any):
    """
    Recursively convert Decimal instances back to native Python numeric types.
    """
    if isinstance(obj, list):
        return [_from_dynamo(item) for item in obj]
    if isinstance(obj, dict):
        return {k: _from_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, Decimal):
        if obj % 1 == 0:
            return int(obj)
        return float(obj)
    return obj
