"""
Pytest configuration and shared fixtures.
"""

import pytest
from unittest.mock import Mock

from requests import Response
from requests.structures import CaseInsensitiveDict

from odata_client import create_client


BASE_URL = "http://test.example.com/odata.svc/"


def build_response(status=200, body=b"", content_type=None, headers=None):
    """Build a real requests.Response without touching the network."""
    r = Response()
    r.status_code = status
    r._content = body.encode("utf-8") if isinstance(body, str) else body
    r.headers = CaseInsensitiveDict(headers or {})
    if content_type:
        r.headers["Content-Type"] = content_type
    r.encoding = "utf-8"
    return r


@pytest.fixture
def make_response():
    return build_response


@pytest.fixture
def sample_metadata_xml():
    """Sample OData $metadata XML."""
    return """<?xml version="1.0" encoding="utf-8"?>
<edmx:Edmx Version="1.0" xmlns:edmx="http://schemas.microsoft.com/ado/2007/06/edmx">
  <edmx:DataServices m:DataServiceVersion="2.0" xmlns:m="http://schemas.microsoft.com/ado/2007/08/dataservices/metadata">
    <Schema Namespace="TestService" xmlns="http://schemas.microsoft.com/ado/2008/09/edm">
      <EntityType Name="Order">
        <Key>
          <PropertyRef Name="ID"/>
        </Key>
        <Property Name="ID" Type="Edm.Int32" Nullable="false"/>
        <Property Name="Total" Type="Edm.Decimal"/>
      </EntityType>
      <EntityType Name="Customer">
        <Key>
          <PropertyRef Name="ID"/>
        </Key>
        <Property Name="ID" Type="Edm.String" Nullable="false"/>
      </EntityType>
      <EntityContainer Name="TestService" m:IsDefaultEntityContainer="true">
        <EntitySet Name="Orders" EntityType="TestService.Order"/>
        <EntitySet Name="Customers" EntityType="TestService.Customer"/>
      </EntityContainer>
    </Schema>
  </edmx:DataServices>
</edmx:Edmx>"""


@pytest.fixture
def sample_entity_json():
    """Sample verbose JSON entity."""
    return '{"d": {"ID": 1, "Total": "12.50"}}'


@pytest.fixture
def mock_transport(sample_entity_json):
    """Transport whose send() answers every request with one JSON entity."""
    transport = Mock()
    transport.send = Mock(
        return_value=build_response(200, sample_entity_json, "application/json;odata=verbose")
    )
    return transport


@pytest.fixture
def metadata_transport(sample_metadata_xml, sample_entity_json):
    """Transport serving $metadata as XML and JSON for everything else."""
    def send(desc):
        if desc.url.endswith("$metadata"):
            return build_response(200, sample_metadata_xml, "application/xml")
        return build_response(200, sample_entity_json, "application/json")

    transport = Mock()
    transport.send = Mock(side_effect=send)
    return transport


@pytest.fixture
def client(mock_transport):
    return create_client(url=BASE_URL, transport=mock_transport)


@pytest.fixture
def meta_client(metadata_transport):
    return create_client(url=BASE_URL, transport=metadata_transport)
