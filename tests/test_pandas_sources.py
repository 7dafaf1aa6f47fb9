"""Tests for source table loaders and normalisers."""

from datetime import date

import pandas as pd
import pytest

from customer_volume_audit.pandas import (
    dataframe_to_delivery_costs,
    dataframe_to_locations,
    dataframe_to_profiles,
    dataframe_to_transactions,
    load_transactions_csv,
    standardize_columns,
)


class TestStandardizeColumns:
    """Test standardize_columns normalisation."""

    def test_lowercase_snake_case(self):
        df = pd.DataFrame(columns=[" CUSTOMER_NUMBER ", "Cold Drink Channel", "Vol-Range"])
        assert list(standardize_columns(df).columns) == [
            "customer_number",
            "cold_drink_channel",
            "vol_range",
        ]

    def test_does_not_mutate_input(self):
        df = pd.DataFrame(columns=["A B"])
        standardize_columns(df)
        assert list(df.columns) == ["A B"]


class TestDataFrameToTransactions:
    """Test dataframe_to_transactions conversion."""

    def test_source_export_columns(self):
        """Upper-case export columns and customer_number are accepted."""
        df = pd.DataFrame(
            {
                "CUSTOMER_NUMBER": [501556470, 501556470],
                "YEAR": [2023, 2024],
                "ORDER_TYPE": ["MYCOKE LEGACY", None],
                "DELIVERED_CASES": [12.0, None],
                "DELIVERED_GALLONS": [0.0, 2.5],
                "TRANSACTION_DATE": ["1/5/2023", "2/7/2024"],
            }
        )

        records = dataframe_to_transactions(df)

        assert len(records) == 2
        assert records[0].customer_id == "501556470"
        assert records[0].year == 2023
        assert records[0].order_type == "MYCOKE LEGACY"
        assert records[0].transaction_date == date(2023, 1, 5)
        assert records[1].order_type is None
        assert records[1].delivered_cases is None
        assert records[1].delivered_gallons == 2.5

    def test_year_derived_from_date(self):
        df = pd.DataFrame(
            {
                "customer_id": ["C1"],
                "delivered_cases": [1.0],
                "delivered_gallons": [0.0],
                "transaction_date": ["2022-11-30"],
            }
        )
        assert dataframe_to_transactions(df)[0].year == 2022

    def test_missing_columns_raises_error(self):
        df = pd.DataFrame({"customer_id": ["C1"], "year": [2023]})
        with pytest.raises(ValueError, match="missing required columns"):
            dataframe_to_transactions(df)

    def test_missing_year_raises_error(self):
        df = pd.DataFrame(
            {
                "customer_id": ["C1"],
                "delivered_cases": [1.0],
                "delivered_gallons": [0.0],
                "transaction_date": ["not a date"],
            }
        )
        with pytest.raises(ValueError, match="missing year"):
            dataframe_to_transactions(df)

    def test_missing_customer_id_raises_error(self):
        """Blank ids fail the load instead of merging into one customer."""
        df = pd.DataFrame(
            {
                "customer_id": ["501", None, "  "],
                "year": [2023, 2023, 2023],
                "delivered_cases": [1.0, 2.0, 3.0],
                "delivered_gallons": [0.0, 0.0, 0.0],
            }
        )
        with pytest.raises(ValueError, match="missing customer_id in 2 rows"):
            dataframe_to_transactions(df)

    def test_empty_dataframe_returns_empty_list(self):
        df = pd.DataFrame(
            columns=["customer_id", "year", "delivered_cases", "delivered_gallons"]
        )
        assert dataframe_to_transactions(df) == []

    def test_load_csv(self, tmp_path):
        path = tmp_path / "transactions.csv"
        path.write_text(
            "CUSTOMER_NUMBER,YEAR,ORDER_TYPE,DELIVERED_CASES,DELIVERED_GALLONS\n"
            "C1,2023,EDI,5,\n"
        )

        records = load_transactions_csv(path)

        assert records[0].customer_id == "C1"
        assert records[0].delivered_cases == 5.0
        assert records[0].delivered_gallons is None


class TestDataFrameToProfiles:
    """Test dataframe_to_profiles conversion."""

    def test_profile_export_columns(self):
        df = pd.DataFrame(
            {
                "CUSTOMER_NUMBER": [501556470],
                "ON_BOARDING_DATE": ["2015-03-02"],
                "FIRST_DELIVERY_DATE": ["2015-03-10"],
                "COLD_DRINK_CHANNEL": ["DINING"],
                "TRADE_CHANNEL": ["FAST CASUAL DINING"],
                "LOCAL_MARKET_PARTNER": [True],
                "CO2_CUSTOMER": ["FALSE"],
                "ZIP_CODE": [71018.0],
            }
        )

        profile = dataframe_to_profiles(df)[0]

        assert profile.customer_id == "501556470"
        assert profile.onboarding_date == date(2015, 3, 2)
        assert profile.first_delivery_date == date(2015, 3, 10)
        assert profile.cold_drink_channel == "DINING"
        assert profile.local_market_partner is True
        assert profile.co2_customer is False
        assert profile.zip_code == "71018"
        assert profile.is_fountain_only is True

    def test_optional_columns_absent(self):
        profile = dataframe_to_profiles(pd.DataFrame({"customer_id": ["C1"]}))[0]
        assert profile.zip_code is None
        assert profile.local_market_partner is None
        assert profile.is_fountain_only is False

    def test_unrecognised_flag_is_missing(self):
        df = pd.DataFrame({"customer_id": ["C1"], "co2_customer": ["maybe"]})
        assert dataframe_to_profiles(df)[0].co2_customer is None

    def test_missing_customer_id_raises_error(self):
        df = pd.DataFrame({"customer_id": ["501", None], "zip_code": ["71018", "71019"]})
        with pytest.raises(ValueError, match="missing customer_id in 1 rows"):
            dataframe_to_profiles(df)


class TestDataFrameToLocations:
    """Test dataframe_to_locations conversion."""

    def test_full_address_format(self):
        df = pd.DataFrame(
            {
                "zip": [71018],
                "full address": [
                    "71018,Cotton Valley,Louisiana,LA,Webster,119,32.819,-93.4158"
                ],
            }
        )

        location = dataframe_to_locations(df)[0]

        assert location.zip_code == "71018"
        assert location.city == "Cotton Valley"
        assert location.state == "Louisiana"
        assert location.county == "Webster"
        assert location.latitude == pytest.approx(32.819)
        assert location.longitude == pytest.approx(-93.4158)

    def test_explicit_columns(self):
        df = pd.DataFrame({"zip_code": ["02101"], "city": ["Boston"], "state": ["MA"]})
        location = dataframe_to_locations(df)[0]
        assert location.zip_code == "02101"
        assert location.city == "Boston"
        assert location.county is None


class TestDataFrameToDeliveryCosts:
    """Test dataframe_to_delivery_costs conversion."""

    def test_schedule_export_columns(self):
        df = pd.DataFrame(
            {
                "Cold Drink Channel": ["DINING"],
                "Vol Range": ["0 - 149"],
                "Applicable To": ["Bottles and Cans"],
                "Median Delivery Cost": ["$8.06"],
                "Cost Type": ["Per Case"],
            }
        )

        rate = dataframe_to_delivery_costs(df)[0]

        assert rate.cold_drink_channel == "DINING"
        assert rate.volume_range == "0 - 149"
        assert rate.median_delivery_cost == pytest.approx(8.06)
        assert rate.applicable_to == "Bottles and Cans"
        assert rate.cost_type == "Per Case"

    def test_blank_cost_raises_error(self):
        df = pd.DataFrame(
            {
                "cold_drink_channel": ["DINING"],
                "volume_range": ["0 - 149"],
                "median_delivery_cost": [None],
            }
        )
        with pytest.raises(ValueError, match="has no median_delivery_cost"):
            dataframe_to_delivery_costs(df)

    @pytest.mark.parametrize("column", ["cold_drink_channel", "volume_range"])
    def test_blank_key_raises_error(self, column):
        """A blank channel or range never becomes a lookup key."""
        data = {
            "cold_drink_channel": ["DINING"],
            "volume_range": ["0 - 149"],
            "median_delivery_cost": [8.0],
        }
        data[column] = [None]
        with pytest.raises(ValueError, match="has no cold_drink_channel or volume_range"):
            dataframe_to_delivery_costs(pd.DataFrame(data))

    def test_missing_columns_raises_error(self):
        with pytest.raises(ValueError, match="missing required columns"):
            dataframe_to_delivery_costs(pd.DataFrame({"cold_drink_channel": ["DINING"]}))
