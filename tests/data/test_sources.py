"""Tests for the upstream HTTP clients, driven through httpx.MockTransport."""

from datetime import date

import httpx
import pytest

from propcast.data.boe import BankOfEnglandClient, parse_bank_rate_csv, parse_bank_rate_html
from propcast.data.land_registry import LandRegistryClient, parse_price_paid_csv
from propcast.data.ons import ONSClient, latest_observation
from propcast.data.police import PoliceClient, categorize_crimes, default_crime_month
from propcast.data.postcodes import PostcodesClient
from propcast.errors import UpstreamError
from propcast.models.market import Coordinates, PropertyType, SourceStatus


def transport(handler) -> httpx.MockTransport:
    return httpx.MockTransport(handler)


# ── Bank of England ──────────────────────────────────────────────

BOE_CSV = """DATE,IUDBEDR
01 Aug 2024,5.00
07 Nov 2024,4.75
06 Feb 2025,4.50
"""


class TestBankOfEngland:
    def test_csv_takes_latest_row(self):
        assert parse_bank_rate_csv(BOE_CSV) == 4.5

    def test_csv_without_values(self):
        with pytest.raises(UpstreamError):
            parse_bank_rate_csv("DATE,IUDBEDR\n")

    def test_html_prefers_bank_rate_sentence(self):
        assert parse_bank_rate_html("<p>Mortgage 6.1%</p><p>Bank Rate is 4.25%</p>") == 4.25

    def test_html_any_percentage(self):
        assert parse_bank_rate_html("<span>4.75%</span>") == 4.75

    async def test_database_first(self):
        def handler(request):
            assert request.url.params["SeriesCodes"] == "IUDBEDR"
            return httpx.Response(200, text=BOE_CSV)

        assert await BankOfEnglandClient(transport=transport(handler)).get_base_rate() == 4.5

    async def test_falls_back_to_web_page(self):
        def handler(request):
            if "fromshowcolumns" in request.url.path:
                return httpx.Response(503)
            return httpx.Response(200, text="<h2>Bank Rate is 4.00%</h2>")

        assert await BankOfEnglandClient(transport=transport(handler)).get_base_rate() == 4.0

    async def test_all_sources_failed(self):
        client = BankOfEnglandClient(transport=transport(lambda r: httpx.Response(500)))
        with pytest.raises(UpstreamError, match="all base rate sources failed"):
            await client.get_base_rate()


# ── ONS ──────────────────────────────────────────────────────────

def ons_payload(values, period="months"):
    return {period: [{"date": f"2025 P{i}", "value": v} for i, v in enumerate(values)]}


class TestONS:
    def test_latest_observation(self):
        assert latest_observation(ons_payload(["3.1", "3.4", "3.5"])) == 3.5

    def test_latest_skips_blank(self):
        assert latest_observation(ons_payload(["3.1", "3.4", ""])) == 3.4

    def test_no_observations(self):
        with pytest.raises(UpstreamError):
            latest_observation({"months": []})

    async def test_inflation_uses_cpih(self):
        def handler(request):
            assert request.url.path.endswith("/cpih01/editions/time-series/timeseries/L55O.json")
            return httpx.Response(200, json=ons_payload(["3.8", "4.1"]))

        assert await ONSClient(transport=transport(handler)).get_inflation() == 4.1

    async def test_inflation_falls_back_to_cpi(self):
        def handler(request):
            if "L55O" in request.url.path:
                return httpx.Response(404)
            return httpx.Response(200, json=ons_payload(["3.0"]))

        assert await ONSClient(transport=transport(handler)).get_inflation() == 3.0

    async def test_unemployment(self):
        handler = lambda request: httpx.Response(200, json=ons_payload(["4.2", "4.4"]))
        assert await ONSClient(transport=transport(handler)).get_unemployment_rate() == 4.4

    async def test_gdp_growth_reads_quarters(self):
        def handler(request):
            assert "IHYQ" in request.url.path
            return httpx.Response(200, json=ons_payload(["0.2", "0.7"], period="quarters"))

        assert await ONSClient(transport=transport(handler)).get_gdp_growth() == 0.7

    async def test_invalid_json(self):
        handler = lambda request: httpx.Response(200, text="<html>maintenance</html>")
        with pytest.raises(UpstreamError, match="not valid JSON"):
            await ONSClient(transport=transport(handler)).get_unemployment_rate()


# ── Land Registry ────────────────────────────────────────────────

PPD_CSV = (
    '"{A1}","450000","2024-03-15 00:00","SW1A 1AA","F","N","L","FLAT 2","10","DOWNING STREET","","LONDON","WESTMINSTER"\n'
    '"{A2}","1250000","2024-06-01 00:00","SW1A 1AA","D","Y","F","10","","DOWNING STREET","","LONDON","WESTMINSTER"\n'
    '"{A3}","not-a-price","2024-05-01 00:00","SW1A 1AA","T","N","F","1","","STREET","","LONDON","WESTMINSTER"\n'
    '"{A4}","300000","2024-01-01"\n'
    '"{A5}","0","2024-02-01 00:00","SW1A 1AA","T","N","F","1","","STREET","","LONDON","WESTMINSTER"\n'
    '"{A6}","390000","15/03/2024","SW1A 1AA","T","N","F","1","","STREET","","LONDON","WESTMINSTER"\n'
)


class TestLandRegistry:
    def test_parse_skips_malformed_rows(self):
        sales = parse_price_paid_csv(PPD_CSV)
        assert [s.price for s in sales] == [1_250_000, 450_000]

    def test_parse_fields(self):
        newest, older = parse_price_paid_csv(PPD_CSV)
        assert newest.date == date(2024, 6, 1)
        assert newest.property_type == PropertyType.DETACHED
        assert newest.new_build is True
        assert newest.tenure == "F"
        assert older.address == "FLAT 2 10 DOWNING STREET"
        assert older.property_type == PropertyType.FLAT

    def test_parse_skips_header(self):
        header = "id,price,date,postcode,type,new,tenure,paon,saon,street,locality,town\n"
        assert len(parse_price_paid_csv(header + PPD_CSV)) == 2

    def test_unknown_type_is_other(self):
        row = '"{A}","200000","2024-01-01","M1 1AE","X","N","F","1","","ST","","MANCHESTER"\n'
        assert parse_price_paid_csv(row)[0].property_type == PropertyType.OTHER

    def test_limit(self):
        row = '"A","200000","2024-01-{day:02d}","M1 1AE","T","N","F","1","","ST","","MANCHESTER"\n'
        text = "".join(row.format(day=d) for d in range(1, 29))
        sales = parse_price_paid_csv(text, limit=5)
        assert len(sales) == 5
        assert sales[0].date == date(2024, 1, 28)

    def test_empty_payload(self):
        assert parse_price_paid_csv("") == []

    async def test_client_sends_postcode(self):
        def handler(request):
            assert request.url.params["postcode"] == "SW1A1AA"
            assert request.url.params.get_list("et[]") == ["lrcommon:freehold", "lrcommon:leasehold"]
            return httpx.Response(200, text=PPD_CSV)

        sales = await LandRegistryClient(transport=transport(handler)).get_recent_sales("sw1a 1aa")
        assert len(sales) == 2

    async def test_client_http_error(self):
        client = LandRegistryClient(transport=transport(lambda r: httpx.Response(502)))
        with pytest.raises(UpstreamError, match="HTTP 502"):
            await client.get_recent_sales("SW1A 1AA")


# ── postcodes.io ─────────────────────────────────────────────────

class TestPostcodes:
    async def test_full_postcode(self):
        def handler(request):
            assert request.url.path == "/postcodes/SW1A1AA"
            return httpx.Response(200, json={"status": 200, "result": {"latitude": 51.501, "longitude": -0.1416}})

        coords = await PostcodesClient(transport=transport(handler)).get_coordinates("SW1A 1AA")
        assert (coords.latitude, coords.longitude) == (51.501, -0.1416)

    async def test_falls_back_to_outward_code(self):
        seen = []

        def handler(request):
            seen.append(request.url.path)
            if request.url.path.startswith("/postcodes/"):
                return httpx.Response(404, json={"status": 404, "error": "Postcode not found"})
            return httpx.Response(200, json={"status": 200, "result": {"latitude": 53.48, "longitude": -2.24}})

        coords = await PostcodesClient(transport=transport(handler)).get_coordinates("M1 9ZZ")
        assert seen == ["/postcodes/M19ZZ", "/outcodes/M1"]
        assert coords.latitude == 53.48

    async def test_missing_coordinates(self):
        handler = lambda request: httpx.Response(200, json={"status": 200, "result": {"latitude": None}})
        with pytest.raises(UpstreamError, match="no coordinates"):
            await PostcodesClient(transport=transport(handler)).get_coordinates("SW1A 1AA")

    async def test_nearest_postcode(self):
        def handler(request):
            assert request.url.path == "/postcodes"
            assert request.url.params["lat"] == "53.48"
            assert request.url.params["lon"] == "-2.24"
            return httpx.Response(200, json={"status": 200, "result": [{"postcode": "M1 1AE", "distance": 12.3}]})

        postcode = await PostcodesClient(transport=transport(handler)).get_nearest_postcode(Coordinates(53.48, -2.24))
        assert postcode == "M1 1AE"

    async def test_nearest_postcode_none_found(self):
        handler = lambda request: httpx.Response(200, json={"status": 200, "result": None})
        with pytest.raises(UpstreamError, match="no postcode near"):
            await PostcodesClient(transport=transport(handler)).get_nearest_postcode(Coordinates(0.0, 0.0))


# ── Police ───────────────────────────────────────────────────────

class TestPolice:
    def test_default_month_two_months_back(self):
        assert default_crime_month(date(2025, 3, 10)) == "2025-01"
        assert default_crime_month(date(2025, 1, 31)) == "2024-11"

    def test_categorize(self):
        crimes = [{"category": "burglary"}, {"category": "burglary"}, {"category": "drugs"}, {}]
        assert categorize_crimes(crimes) == {"burglary": 2, "drugs": 1, "unknown": 1}

    async def test_street_crime(self):
        def handler(request):
            assert request.url.params["date"] == "2025-01"
            return httpx.Response(200, json=[{"category": "burglary"}] * 3 + [{"category": "shoplifting"}])

        crime = await PoliceClient(transport=transport(handler)).get_street_crime(51.5, -0.14, "2025-01")
        assert crime.total_crimes == 4
        assert crime.crime_rate == 48.0
        assert crime.categories == {"burglary": 3, "shoplifting": 1}
        assert crime.source == SourceStatus.LIVE

    async def test_non_list_payload(self):
        handler = lambda request: httpx.Response(200, json={"error": "bad request"})
        with pytest.raises(UpstreamError, match="expected a list"):
            await PoliceClient(transport=transport(handler)).get_street_crime(51.5, -0.14, "2025-01")

    async def test_non_object_items(self):
        handler = lambda request: httpx.Response(200, json=["oops", "x"])
        with pytest.raises(UpstreamError, match="unexpected crime record"):
            await PoliceClient(transport=transport(handler)).get_street_crime(51.5, -0.14, "2025-01")

    async def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("unreachable")

        with pytest.raises(UpstreamError, match="request failed"):
            await PoliceClient(transport=transport(handler)).get_street_crime(51.5, -0.14, "2025-01")
