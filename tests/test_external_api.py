import httpx
import pytest
import respx

from persondir.external_api import ExternalAPIError, NameMetrics, NameMetricsFetcher

AGE_URL = "https://age.example.com/?name="
GENDER_URL = "https://gender.example.com/?name="
NAT_URL = "https://nat.example.com/?name="


@pytest.fixture
def fetcher():
    return NameMetricsFetcher(
        timeout=2.0, age_url=AGE_URL, gender_url=GENDER_URL, nationality_url=NAT_URL
    )


def mock_services(mock, age=None, gender=None, nationality=None):
    routes = {}
    routes["age"] = mock.get(host="age.example.com").mock(
        return_value=httpx.Response(200, json=age if age is not None else {"age": 42})
    )
    routes["gender"] = mock.get(host="gender.example.com").mock(
        return_value=httpx.Response(200, json=gender if gender is not None else {"gender": "male"})
    )
    routes["nat"] = mock.get(host="nat.example.com").mock(
        return_value=httpx.Response(
            200,
            json=nationality
            if nationality is not None
            else {"country": [{"country_id": "US"}, {"country_id": "RU"}]},
        )
    )
    return routes


def test_fetches_all_metrics(fetcher):
    with respx.mock() as mock:
        routes = mock_services(mock)
        result = fetcher.get_name_metrics("Ivan")
        assert routes["age"].calls.last.request.url == AGE_URL + "Ivan"
        assert routes["nat"].calls.last.request.url == NAT_URL + "Ivan"
    assert result == NameMetrics(age=42, gender="male", nationality="US")


def test_age_is_truncated(fetcher):
    with respx.mock() as mock:
        mock_services(mock, age={"age": 42.7})
        result = fetcher.get_name_metrics("Ivan")
    assert result.age == 42


def test_missing_age_is_incomplete(fetcher):
    with respx.mock() as mock:
        mock_services(mock, age={"age": None})
        with pytest.raises(ExternalAPIError, match="incomplete data from APIs"):
            fetcher.get_name_metrics("Ivan")


def test_empty_country_list_is_incomplete(fetcher):
    with respx.mock() as mock:
        mock_services(mock, nationality={"country": []})
        with pytest.raises(ExternalAPIError, match="incomplete data from APIs"):
            fetcher.get_name_metrics("Ivan")


def test_connection_error(fetcher):
    with respx.mock() as mock:
        mock_services(mock)
        mock.get(host="age.example.com").mock(side_effect=httpx.ConnectError("refused"))
        with pytest.raises(ExternalAPIError, match="error fetching age"):
            fetcher.get_name_metrics("Ivan")


def test_invalid_json(fetcher):
    with respx.mock() as mock:
        mock_services(mock)
        mock.get(host="gender.example.com").mock(
            return_value=httpx.Response(200, content=b"not json")
        )
        with pytest.raises(ExternalAPIError, match="error fetching gender"):
            fetcher.get_name_metrics("Ivan")


def test_non_object_json(fetcher):
    with respx.mock() as mock:
        mock_services(mock, nationality=[1, 2])
        with pytest.raises(ExternalAPIError, match="error fetching nationality"):
            fetcher.get_name_metrics("Ivan")


def test_from_env_reads_urls():
    env = {"API_AGIFY": AGE_URL, "API_GENDERIZE": GENDER_URL, "API_NATIONALIZE": NAT_URL}
    fetcher = NameMetricsFetcher.from_env(timeout=3.0, environ=env)
    assert fetcher.age_url == AGE_URL
    assert fetcher.gender_url == GENDER_URL
    assert fetcher.nationality_url == NAT_URL
    assert fetcher.timeout == 3.0