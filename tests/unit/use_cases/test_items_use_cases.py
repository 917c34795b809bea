from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from src.app.use_cases.items import CreateItemCommand, CreateItemUseCase, GetItemUseCase
from src.domain.entities import Bid, Item, ItemStatus
from tests.utils.fakes import recorded_actions


@pytest.mark.asyncio
async def test_create_item_opens_24h_auction(mock_uow):
    seller = uuid4()
    before = datetime.utcnow()

    result = await CreateItemUseCase(mock_uow).execute(
        seller, CreateItemCommand(title="Vintage Camera", description="Working", start_price=99.999)
    )

    assert result.is_ok()
    item = mock_uow.items.create.call_args.args[0]
    assert item.start_price == item.current_bid == 100.0
    assert item.status == ItemStatus.active
    assert item.created_by == seller
    assert item.category == "General"
    assert before + timedelta(hours=24) <= item.end_time <= datetime.utcnow() + timedelta(hours=24)
    assert result.value.bids == []
    assert recorded_actions(mock_uow) == ["ITEM_CREATED"]


@pytest.mark.asyncio
async def test_create_item_requires_title(mock_uow):
    result = await CreateItemUseCase(mock_uow).execute(
        uuid4(), CreateItemCommand(title="  ", description="Working", start_price=10)
    )

    assert result.error.code == "VALIDATION_ERROR"
    mock_uow.items.create.assert_not_awaited()


@pytest.mark.asyncio
async def test_get_item_includes_bid_history(mock_uow):
    item = Item(
        title="Vintage Camera",
        description="Working",
        start_price=100.0,
        current_bid=120.0,
        created_by=uuid4(),
        end_time=datetime.utcnow() + timedelta(hours=1),
    )
    bidder = uuid4()
    mock_uow.items.get_by_id.return_value = item
    mock_uow.items.get_bids.return_value = [Bid(item_id=item.id, user_id=bidder, amount=120.0)]

    result = await GetItemUseCase(mock_uow).execute(item.id)

    assert result.value.current_bid == 120.0
    assert [(b.user_id, b.amount) for b in result.value.bids] == [(str(bidder), 120.0)]


@pytest.mark.asyncio
async def test_get_unknown_item(mock_uow):
    result = await GetItemUseCase(mock_uow).execute(uuid4())

    assert result.error.code == "ITEM_NOT_FOUND"
