import re
from datetime import datetime, timezone

from bson import ObjectId
from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError as PydanticValidationError
from pymongo.errors import DuplicateKeyError

from plan_api.config import logger
from plan_api.database import get_db
from plan_api.errors import ConflictError, NotFoundError, ValidationError, validation_error_from
from plan_api.middleware.identity import get_caller_id
from plan_api.models.filter_model import PlanFilter
from plan_api.models.plan_model import PlanCreate, PlanOut
from plan_api.services.date_range import resolve_date_range
from plan_api.utils.misc import escape_regex
from plan_api.utils.pagination import paginate

router = APIRouter()

IDENTIFIER_PATTERN = re.compile(r"[0-9a-f]{24}")
DUPLICATE_CODE_MESSAGE = "A plan with the specified code already exists."
NOT_FOUND_MESSAGE = "Cannot find a plan with the specified identifier."


# NOTE: Input is not sanitized against XSS.
@router.post("/plans", status_code=201)
async def create_plan(
    request: Request,
    owner_id: ObjectId = Depends(get_caller_id),
    db=Depends(get_db),
):
    try:
        body = await request.json()
    except ValueError:
        raise ValidationError("The request body must be valid JSON.")

    try:
        data = PlanCreate.model_validate(body)
    except PydanticValidationError as e:
        raise validation_error_from(e)

    # Advisory only; the unique index on (owner_id, code) has the final say.
    existing = await db.plans.find_one({"owner_id": owner_id, "code": data.code})
    if existing:
        raise ConflictError(DUPLICATE_CODE_MESSAGE)

    # Truncated to BSON millisecond precision.
    now = datetime.now(timezone.utc)
    now = now.replace(microsecond=now.microsecond // 1000 * 1000)
    plan_data = {
        **data.to_document(),
        "owner_id": owner_id,
        "created_at": now,
        "updated_at": now,
    }

    try:
        result = await db.plans.insert_one(plan_data)
    except DuplicateKeyError:
        raise ConflictError(DUPLICATE_CODE_MESSAGE)

    plan_data["_id"] = result.inserted_id
    logger.info("Plan %s (%s) created by %s", result.inserted_id, data.code, owner_id)

    return PlanOut.from_document(plan_data).to_external()


@router.get("/plans")
async def list_plans(
    request: Request,
    owner_id: ObjectId = Depends(get_caller_id),
    db=Depends(get_db),
):
    try:
        value = PlanFilter.from_query(request.query_params)
    except PydanticValidationError as e:
        raise validation_error_from(e)

    filters = {"owner_id": owner_id}

    bounds = resolve_date_range(value.date_range)
    if bounds is not None:
        start_date, end_date = bounds
        filters["created_at"] = {"$gte": start_date, "$lte": end_date}

    if value.search:
        regex = re.compile(escape_regex(value.search), re.IGNORECASE)
        filters["$or"] = [{"code": regex}, {"name": regex}]

    logger.debug("Listing plans for %s: %s", owner_id, value)

    # The pager counts from 1, clients count from 0.
    plans = await paginate(db.plans, filters, page=value.page + 1, limit=value.limit)

    return {
        "totalRecords": plans.total_docs,
        "page": value.page,
        "limit": plans.limit,
        "totalPages": plans.total_pages,
        "previousPage": plans.prev_page - 1 if plans.prev_page else None,
        "nextPage": plans.next_page - 1 if plans.next_page else None,
        "hasPreviousPage": plans.has_prev_page,
        "hasNextPage": plans.has_next_page,
        "records": [PlanOut.from_document(plan).to_external() for plan in plans.docs],
    }


# A plan created by one user is hidden from every other user.
@router.get("/plans/{identifier}")
async def get_plan(
    identifier: str,
    owner_id: ObjectId = Depends(get_caller_id),
    db=Depends(get_db),
):
    if not IDENTIFIER_PATTERN.fullmatch(identifier):
        raise ValidationError("The specified plan identifier is invalid.")

    plan = await db.plans.find_one({"_id": ObjectId(identifier), "owner_id": owner_id})
    if not plan:
        raise NotFoundError(NOT_FOUND_MESSAGE)

    return PlanOut.from_document(plan).to_external()
