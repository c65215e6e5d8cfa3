"""
Unit tests per ProjectService e per il margine allegato ai progetti.
"""

import uuid
from decimal import Decimal

import pytest
from sqlalchemy.sql.dml import Update

from app.core.exceptions import NotFoundError
from app.schemas.project import ProjectDetail
from app.services.project_service import ProjectService, build_project_read
from conftest import MockContract, MockProject, scalar_result, scalars_result


@pytest.fixture
def project():
    """Progetto con una vendita da 100.000 e un acquisto da 60.000."""
    return MockProject(
        contracts=[
            MockContract(contract_type="SALES", amount=Decimal("100000.00")),
            MockContract(contract_type="PURCHASE", amount=Decimal("60000.00"), contract_number="C-2026-002"),
        ],
    )


class TestBuildProjectRead:

    def test_contract_count_and_margin(self, project):
        data = build_project_read(project)

        assert data.contract_count == 2
        assert data.margin.sales_count == 1
        assert data.margin.purchase_count == 1
        assert data.margin.gross_profit == Decimal("40000.00")
        assert data.margin.profit_rate == Decimal("40.00")

    def test_project_without_contracts(self):
        data = build_project_read(MockProject(contracts=[]))

        assert data.contract_count == 0
        assert data.margin.sales_amount == Decimal("0")
        assert data.margin.profit_rate == Decimal("0")

    def test_invalid_amount_degrades_margin_to_none(self):
        broken = MockProject(contracts=[MockContract(contract_type="SALES", amount="non-un-numero")])

        data = build_project_read(broken)

        assert data.margin is None
        assert data.contract_count == 1

    def test_detail_lists_contracts(self, project):
        data = build_project_read(project, detail=True)

        assert isinstance(data, ProjectDetail)
        assert [c.contract_number for c in data.contracts] == ["C-2026-001", "C-2026-002"]
        assert data.margin.gross_profit == Decimal("40000.00")


class TestProjectService:

    @pytest.mark.asyncio
    async def test_get_all_returns_total(self, mock_db, project):
        mock_db.execute.side_effect = [scalars_result([project]), scalar_result(7)]

        items, total = await ProjectService().get_all(mock_db, page=1, per_page=1)

        assert items == [project]
        assert total == 7

    @pytest.mark.asyncio
    async def test_get_by_id_not_found(self, mock_db):
        mock_db.execute.return_value = scalar_result(None)

        with pytest.raises(NotFoundError):
            await ProjectService().get_by_id(mock_db, uuid.uuid4())

    @pytest.mark.asyncio
    async def test_delete_detaches_contracts(self, mock_db, project):
        mock_db.execute.side_effect = [scalar_result(project), scalar_result(None)]

        await ProjectService().delete(mock_db, project.id)

        detach = mock_db.execute.await_args_list[1][0][0]
        assert isinstance(detach, Update)
        assert detach.table.name == "contracts"
        params = detach.compile().params
        assert params["project_id"] is None
        assert project.id in params.values()
        mock_db.delete.assert_awaited_once_with(project)
        mock_db.flush.assert_awaited()
