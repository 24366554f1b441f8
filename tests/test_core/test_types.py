"""
Tests for the primary key descriptor and the error taxonomy.
"""

import pytest
from sqlalchemy import Column, Integer, MetaData, Table

from conftest import LineItem, Order

from ormtenant.core.errors import ConfigurationError, OrmTenantError, ValidationError
from ormtenant.core.types import PrimaryKey


class TestPrimaryKey:
    def test_single_column(self):
        pk = PrimaryKey.for_model(Order)
        assert pk.names == ["id"]
        assert not pk.is_composite
        assert len(pk) == 1

    def test_composite_in_declared_order(self):
        pk = PrimaryKey.for_model(LineItem)
        assert pk.names == ["order_id", "line_no"]
        assert pk.is_composite

    def test_for_table(self):
        pk = PrimaryKey.for_table(LineItem.__table__)
        assert pk.names == ["order_id", "line_no"]

    def test_empty_key_is_rejected(self):
        with pytest.raises(ConfigurationError):
            PrimaryKey(())

    def test_table_without_key_is_rejected(self):
        table = Table("keyless", MetaData(), Column("value", Integer))
        with pytest.raises(ConfigurationError) as exc_info:
            PrimaryKey.for_table(table)
        assert exc_info.value.details == {"model": "keyless"}


class TestErrors:
    def test_base_error_to_dict(self):
        error = OrmTenantError("boom", details={"a": 1})
        assert error.to_dict() == {
            "code": "ORMTENANT_ERROR",
            "message": "boom",
            "details": {"a": 1},
        }

    def test_configuration_error(self):
        error = ConfigurationError("bad setup", model="Order")
        assert error.code == "CONFIGURATION_ERROR"
        assert error.details == {"model": "Order"}
        assert isinstance(error, OrmTenantError)

    def test_validation_error(self):
        error = ValidationError("unknown column", field="nope")
        assert error.code == "VALIDATION_ERROR"
        assert error.details == {"field": "nope"}
        assert str(error) == "unknown column"
