"""Unit tests for CatalogSyncService."""

import asyncio
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from walkin_pos.models.menu_models import CatalogState, MenuItem
from walkin_pos.models.pipeline_models import Advisory, AdvisoryCode
from walkin_pos.services.menu_service_client import MenuServiceClient
from walkin_pos.services.sync_service import CatalogSyncService


@pytest.mark.unit
class TestCatalogSyncService:
    """Test suite for CatalogSyncService."""

    @pytest.fixture
    def fetched_items(self) -> list[MenuItem]:
        """Items as returned by the catalog client."""
        return [
            MenuItem(id=1, name="Idli", price=Decimal("10"), category_name="A"),
            MenuItem(id=2, name="Vada", price=Decimal("20"), category_name="B"),
        ]

    @pytest.fixture
    def mock_menu_client(self, fetched_items: list[MenuItem]) -> MenuServiceClient:
        """Create a mock MenuServiceClient that always succeeds."""
        client = MagicMock(spec=MenuServiceClient)
        client.get_categories = AsyncMock(return_value=["A", "B"])
        client.get_menu_items = AsyncMock(
            side_effect=lambda _outlet: [item.model_copy() for item in fetched_items]
        )
        return client

    @pytest.fixture
    def advisories(self) -> list[Advisory]:
        """Collects advisories raised by the service."""
        return []

    @pytest.fixture
    def state(self) -> CatalogState:
        """Empty, connected catalog."""
        return CatalogState()

    @pytest.fixture
    def sync_service(
        self,
        mock_menu_client: MenuServiceClient,
        state: CatalogState,
        advisories: list[Advisory],
    ) -> CatalogSyncService:
        """Create a CatalogSyncService with mocked dependencies."""
        return CatalogSyncService(
            menu_service_client=mock_menu_client,
            catalog_state=state,
            outlet_id=4,
            on_advisory=advisories.append,
        )

    @pytest.mark.asyncio
    async def test_sync_categories_selects_first(
        self, sync_service: CatalogSyncService, state: CatalogState, mock_menu_client: MagicMock
    ) -> None:
        """Test that the first category is selected when nothing is selected yet."""
        result = await sync_service.sync_categories()

        assert result is True
        mock_menu_client.get_categories.assert_awaited_once_with(4)
        assert state.categories == ["A", "B"]
        assert state.selected_category == "A"

    @pytest.mark.asyncio
    async def test_sync_categories_keeps_existing_selection(
        self, sync_service: CatalogSyncService, state: CatalogState
    ) -> None:
        """Test that a category the user already chose is kept."""
        state.selected_category = "B"

        await sync_service.sync_categories()

        assert state.selected_category == "B"

    @pytest.mark.asyncio
    async def test_sync_categories_empty_list(
        self, sync_service: CatalogSyncService, state: CatalogState, mock_menu_client: MagicMock
    ) -> None:
        """Test that an empty category list leaves the selection at All Items."""
        mock_menu_client.get_categories = AsyncMock(return_value=[])

        result = await sync_service.sync_categories()

        assert result is True
        assert state.categories == []
        assert state.selected_category is None

    @pytest.mark.asyncio
    async def test_sync_items_replaces_catalog(
        self, sync_service: CatalogSyncService, state: CatalogState
    ) -> None:
        """Test that item sync replaces the whole item list."""
        state.items = [MenuItem(id=99, name="Old", category_name="Z")]

        result = await sync_service.sync_items()

        assert result is True
        assert [item.id for item in state.items] == [1, 2]
        assert state.loading is False

    @pytest.mark.asyncio
    async def test_sync_items_clears_cart(
        self, sync_service: CatalogSyncService, state: CatalogState
    ) -> None:
        """Test that a re-sync starts every quantity at zero."""
        await sync_service.sync_items()
        state.items[0].quantity = 3

        await sync_service.sync_items()

        assert all(item.quantity == 0 for item in state.items)

    @pytest.mark.asyncio
    async def test_sync_is_idempotent(
        self, sync_service: CatalogSyncService, state: CatalogState
    ) -> None:
        """Test that syncing twice against an unchanged catalog yields the same state."""
        await sync_service.sync_all()
        first = state.model_copy(deep=True)

        await sync_service.sync_all()

        assert state == first

    @pytest.mark.asyncio
    async def test_fetch_failure_keeps_previous_catalog(
        self,
        sync_service: CatalogSyncService,
        state: CatalogState,
        mock_menu_client: MagicMock,
        advisories: list[Advisory],
    ) -> None:
        """Test that a failed fetch leaves the catalog untouched and advises."""
        previous = [MenuItem(id=99, name="Old", category_name="Z", quantity=2)]
        state.items = previous
        mock_menu_client.get_menu_items = AsyncMock(return_value=None)

        result = await sync_service.sync_items()

        assert result is False
        assert state.items is previous
        assert state.items[0].quantity == 2
        assert [a.code for a in advisories] == [AdvisoryCode.CATALOG_FETCH_FAILED]
        assert advisories[0].title == "Error"
        assert advisories[0].message == "Failed to load menu."
        assert state.loading is False

    @pytest.mark.asyncio
    async def test_category_fetch_failure(
        self,
        sync_service: CatalogSyncService,
        state: CatalogState,
        mock_menu_client: MagicMock,
        advisories: list[Advisory],
    ) -> None:
        """Test that a failed category fetch keeps the old categories."""
        state.categories = ["Old"]
        mock_menu_client.get_categories = AsyncMock(return_value=None)

        result = await sync_service.sync_categories()

        assert result is False
        assert state.categories == ["Old"]
        assert advisories == [Advisory.catalog_fetch_failed()]

    @pytest.mark.asyncio
    async def test_offline_sync_is_refused(
        self,
        sync_service: CatalogSyncService,
        state: CatalogState,
        mock_menu_client: MagicMock,
        advisories: list[Advisory],
    ) -> None:
        """Test that no request is made while offline and one advisory is raised."""
        state.connected = False

        result = await sync_service.sync_all()

        assert result is False
        mock_menu_client.get_categories.assert_not_awaited()
        mock_menu_client.get_menu_items.assert_not_awaited()
        assert advisories == [Advisory.connectivity_unavailable()]
        assert advisories[0].title == "No Internet"

    @pytest.mark.asyncio
    async def test_offline_single_sync_is_refused(
        self,
        sync_service: CatalogSyncService,
        state: CatalogState,
        mock_menu_client: MagicMock,
        advisories: list[Advisory],
    ) -> None:
        """Test that the individual syncs are gated too."""
        state.connected = False

        assert await sync_service.sync_items() is False
        assert await sync_service.sync_categories() is False
        mock_menu_client.get_menu_items.assert_not_awaited()
        assert len(advisories) == 2

    @pytest.mark.asyncio
    async def test_sync_all_partial_failure(
        self, sync_service: CatalogSyncService, state: CatalogState, mock_menu_client: MagicMock
    ) -> None:
        """Test that one failing half does not prevent the other from applying."""
        mock_menu_client.get_categories = AsyncMock(return_value=None)

        result = await sync_service.sync_all()

        assert result is False
        assert [item.id for item in state.items] == [1, 2]
        assert state.categories == []

    @pytest.mark.asyncio
    async def test_loading_while_in_flight(
        self, sync_service: CatalogSyncService, state: CatalogState, mock_menu_client: MagicMock
    ) -> None:
        """Test that loading stays set until both concurrent fetches finish."""
        release = asyncio.Event()
        seen: list[bool] = []

        async def slow_categories(_outlet: int) -> list[str]:
            await release.wait()
            return ["A"]

        async def fast_items(_outlet: int) -> list[MenuItem]:
            seen.append(state.loading)
            return []

        mock_menu_client.get_categories = AsyncMock(side_effect=slow_categories)
        mock_menu_client.get_menu_items = AsyncMock(side_effect=fast_items)

        task = asyncio.create_task(sync_service.sync_all())
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        assert state.loading is True

        release.set()
        await task

        assert seen == [True]
        assert state.loading is False

    @pytest.mark.asyncio
    async def test_connectivity_restored_triggers_sync(
        self, sync_service: CatalogSyncService, state: CatalogState, mock_menu_client: MagicMock
    ) -> None:
        """Test that an offline to online transition re-syncs."""
        state.connected = False

        result = await sync_service.handle_connectivity_changed(True)

        assert result is True
        assert state.connected is True
        mock_menu_client.get_categories.assert_awaited_once()
        mock_menu_client.get_menu_items.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_connectivity_unchanged_does_not_sync(
        self, sync_service: CatalogSyncService, state: CatalogState, mock_menu_client: MagicMock
    ) -> None:
        """Test that repeated online reports do not re-sync."""
        result = await sync_service.handle_connectivity_changed(True)

        assert result is False
        mock_menu_client.get_menu_items.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_connectivity_lost_records_state(
        self, sync_service: CatalogSyncService, state: CatalogState, mock_menu_client: MagicMock
    ) -> None:
        """Test that losing connectivity only updates the flag."""
        result = await sync_service.handle_connectivity_changed(False)

        assert result is False
        assert state.connected is False
        mock_menu_client.get_menu_items.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_works_without_advisory_sink(self, mock_menu_client: MagicMock) -> None:
        """Test that advisories are optional."""
        state = CatalogState(connected=False)
        service = CatalogSyncService(mock_menu_client, state, outlet_id=4)

        assert await service.sync_all() is False
