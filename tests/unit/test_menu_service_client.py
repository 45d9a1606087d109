"""Unit tests for MenuServiceClient."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from walkin_pos.models.menu_models import FoodType, MenuItem
from walkin_pos.services.menu_service_client import MenuServiceClient


def _response(body: object) -> MagicMock:
    mock_response = MagicMock()
    mock_response.status_code = 200
    mock_response.json.return_value = body
    return mock_response


@pytest.mark.unit
class TestMenuServiceClient:
    """Test suite for MenuServiceClient."""

    @pytest.fixture
    def client(self) -> MenuServiceClient:
        """Create a MenuServiceClient with test configuration."""
        return MenuServiceClient(base_url="https://pos.test.com/api/")

    def test_client_initialization(self) -> None:
        """Test that a trailing slash is dropped from the base URL."""
        client = MenuServiceClient(base_url="https://pos.test.com/api/", timeout_seconds=5.0)

        assert client.base_url == "https://pos.test.com/api"
        assert client.timeout_seconds == 5.0

    @pytest.mark.asyncio
    async def test_get_menu_items_success(
        self, client: MenuServiceClient, mock_catalog_records: list[dict]
    ) -> None:
        """Test successfully fetching and normalizing menu items."""
        mock_response = _response({"data": mock_catalog_records})

        with patch(
            "httpx.AsyncClient.get", new_callable=AsyncMock, return_value=mock_response
        ) as mock_get:
            items = await client.get_menu_items(4)

        mock_get.assert_awaited_once_with("https://pos.test.com/api/items/4")
        assert items is not None
        assert len(items) == 3
        assert all(isinstance(item, MenuItem) for item in items)
        assert items[0].name == "Masala Dosa"
        assert items[0].price == Decimal("60")
        assert items[1].food_type == FoodType.NON_VEG
        assert items[1].description == "No description available"
        assert items[2].category_name == "Others"
        assert all(item.quantity == 0 for item in items)

    @pytest.mark.asyncio
    async def test_get_menu_items_skips_invalid_records(self, client: MenuServiceClient) -> None:
        """Test that invalid records are dropped and the rest kept."""
        mock_response = _response(
            {
                "data": [
                    {"id": 1, "name": "Idli", "price": "10"},
                    {"id": 2, "price": "20"},
                    {"id": 3, "name": "Vada", "price": "-1"},
                ]
            }
        )

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=mock_response):
            items = await client.get_menu_items(4)

        assert items is not None
        assert [item.id for item in items] == [1]

    @pytest.mark.asyncio
    async def test_get_menu_items_loose_fields_keep_sync_alive(
        self, client: MenuServiceClient
    ) -> None:
        """Test that a record with numeric text fields does not fail the whole fetch."""
        mock_response = _response(
            {
                "data": [
                    {"id": 1, "name": "Juice", "price": "30", "categoryName": "Drinks"},
                    {"id": 2, "name": "Soda", "price": "25", "categoryName": 7, "description": 3},
                ]
            }
        )

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=mock_response):
            items = await client.get_menu_items(4)

        assert items is not None
        assert [item.id for item in items] == [1, 2]
        assert items[0].category_name == "Drinks"
        assert items[1].category_name == "Others"
        assert items[1].description == "No description available"

    @pytest.mark.asyncio
    async def test_get_menu_items_first_duplicate_wins(self, client: MenuServiceClient) -> None:
        """Test that a repeated id keeps its first occurrence."""
        mock_response = _response(
            {
                "data": [
                    {"id": 1, "name": "Idli", "price": "10"},
                    {"id": 1, "name": "Idli again", "price": "99"},
                ]
            }
        )

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=mock_response):
            items = await client.get_menu_items(4)

        assert items is not None
        assert len(items) == 1
        assert items[0].name == "Idli"

    @pytest.mark.asyncio
    async def test_get_menu_items_empty_list(self, client: MenuServiceClient) -> None:
        """Test that an empty catalog is a success, not a failure."""
        mock_response = _response({"data": []})

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=mock_response):
            items = await client.get_menu_items(4)

        assert items == []

    @pytest.mark.asyncio
    async def test_get_menu_items_http_error(self, client: MenuServiceClient) -> None:
        """Test that an error status is reported as None."""
        mock_response = MagicMock()
        mock_response.status_code = 500
        mock_response.raise_for_status.side_effect = httpx.HTTPStatusError(
            "Server error", request=MagicMock(), response=mock_response
        )

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=mock_response):
            items = await client.get_menu_items(4)

        assert items is None

    @pytest.mark.asyncio
    async def test_get_menu_items_network_error(self, client: MenuServiceClient) -> None:
        """Test that a transport error is reported as None."""
        with patch(
            "httpx.AsyncClient.get",
            new_callable=AsyncMock,
            side_effect=httpx.ConnectError("Connection failed"),
        ):
            items = await client.get_menu_items(4)

        assert items is None

    @pytest.mark.asyncio
    async def test_get_menu_items_invalid_json(self, client: MenuServiceClient) -> None:
        """Test that an unparseable body is reported as None."""
        mock_response = MagicMock()
        mock_response.status_code = 200
        mock_response.json.side_effect = ValueError("Expecting value")

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=mock_response):
            items = await client.get_menu_items(4)

        assert items is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{}, {"data": None}, {"data": {"id": 1}}, ["not", "wrapped"]])
    async def test_get_menu_items_missing_data(self, client: MenuServiceClient, body: object) -> None:
        """Test that a body without a data array is reported as None."""
        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=_response(body)):
            items = await client.get_menu_items(4)

        assert items is None

    @pytest.mark.asyncio
    async def test_get_categories_success(
        self, client: MenuServiceClient, mock_category_records: list[dict]
    ) -> None:
        """Test fetching category names in service order."""
        mock_response = _response({"data": mock_category_records})

        with patch(
            "httpx.AsyncClient.get", new_callable=AsyncMock, return_value=mock_response
        ) as mock_get:
            categories = await client.get_categories(4)

        mock_get.assert_awaited_once_with("https://pos.test.com/api/categories/4")
        assert categories == ["Breakfast", "Snacks"]

    @pytest.mark.asyncio
    async def test_get_categories_skips_nameless(self, client: MenuServiceClient) -> None:
        """Test that categories without a name are dropped."""
        mock_response = _response({"data": [{"id": 1}, {"id": 2, "name": "Snacks"}, "junk"]})

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=mock_response):
            categories = await client.get_categories(4)

        assert categories == ["Snacks"]

    @pytest.mark.asyncio
    async def test_get_categories_network_error(self, client: MenuServiceClient) -> None:
        """Test that a transport error is reported as None."""
        with patch(
            "httpx.AsyncClient.get",
            new_callable=AsyncMock,
            side_effect=httpx.ReadTimeout("Timed out"),
        ):
            categories = await client.get_categories(4)

        assert categories is None
