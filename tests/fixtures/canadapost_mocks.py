"""
Sample Canada Post rating API response bodies.

Use with the `responses` library to mock HTTP requests in tests.
"""

import requests
import responses

PRICE_QUOTES_XML = """<?xml version="1.0" encoding="UTF-8"?>
<price-quotes xmlns="http://www.canadapost.ca/ws/ship/rate-v4">
  <price-quote>
    <service-code>DOM.EP</service-code>
    <service-link rel="service" href="https://ct.soa-gw.canadapost.ca/rs/ship/service/DOM.EP?country=CA" media-type="application/vnd.cpc.ship.rate-v4+xml"/>
    <service-name>Expedited Parcel</service-name>
    <price-details>
      <base>10.00</base>
      <taxes>
        <gst>0.50</gst>
        <pst>0</pst>
        <hst>0</hst>
      </taxes>
      <due>10.00</due>
      <options>
        <option>
          <option-code>DC</option-code>
          <option-name>Delivery confirmation</option-name>
          <option-price>0</option-price>
        </option>
      </options>
    </price-details>
    <weight-details/>
    <service-standard>
      <am-delivery>false</am-delivery>
      <guaranteed-delivery>true</guaranteed-delivery>
      <expected-transit-time>2</expected-transit-time>
      <expected-delivery-date>2026-10-20</expected-delivery-date>
    </service-standard>
  </price-quote>
  <price-quote>
    <service-code>DOM.PC</service-code>
    <service-name>Priority</service-name>
    <price-details>
      <base>20.00</base>
      <taxes>
        <gst percent="5.0">1.00</gst>
        <pst/>
        <hst percent="13.0">2.60</hst>
      </taxes>
      <due>23.60</due>
    </price-details>
    <service-standard>
      <expected-transit-time>1</expected-transit-time>
      <expected-delivery-date>2026-10-19</expected-delivery-date>
    </service-standard>
  </price-quote>
</price-quotes>
"""

SINGLE_PRICE_QUOTE_XML = """<?xml version="1.0" encoding="UTF-8"?>
<price-quotes xmlns="http://www.canadapost.ca/ws/ship/rate-v4">
  <price-quote>
    <service-code>USA.SP.AIR</service-code>
    <service-name>Small Packet USA Air</service-name>
    <price-details>
      <base>12.40</base>
      <due>12.40</due>
    </price-details>
  </price-quote>
</price-quotes>
"""

NO_PRICE_DETAILS_XML = """<?xml version="1.0" encoding="UTF-8"?>
<price-quotes xmlns="http://www.canadapost.ca/ws/ship/rate-v4">
  <price-quote>
    <service-code>DOM.EP</service-code>
    <service-name>Expedited Parcel</service-name>
  </price-quote>
</price-quotes>
"""

EMPTY_PRICE_QUOTES_XML = """<?xml version="1.0" encoding="UTF-8"?>
<price-quotes xmlns="http://www.canadapost.ca/ws/ship/rate-v4">
</price-quotes>
"""

ERROR_MESSAGES_XML = """<?xml version="1.0" encoding="UTF-8"?>
<messages xmlns="http://www.canadapost.ca/ws/messages">
  <message>
    <code>E002</code>
    <description>AA004: You cannot mail on behalf of the requested customer.</description>
  </message>
</messages>
"""

MULTIPLE_ERROR_MESSAGES_XML = """<?xml version="1.0" encoding="UTF-8"?>
<messages xmlns="http://www.canadapost.ca/ws/messages">
  <message>
    <code>9111</code>
    <description>The destination postal code is invalid.</description>
  </message>
  <message>
    <code>1599</code>
    <description>Parcel weight exceeds the maximum.</description>
  </message>
</messages>
"""


# ============================================================================
# `responses` helpers (call within a @responses.activate block)
# ============================================================================

SANDBOX_RATE_URL = "https://ct.soa-gw.canadapost.ca/rs/ship/price"
FX_RATES_URL = "https://www.visa.ca/cmsapi/fx/rates"


def add_rates_mock(body: str = PRICE_QUOTES_XML, status: int = 200, url: str = SANDBOX_RATE_URL):
    """Register a rating API response."""
    responses.add(
        responses.POST,
        url,
        body=body,
        status=status,
        content_type="application/vnd.cpc.ship.rate-v4+xml",
    )


def add_rates_timeout_mock(url: str = SANDBOX_RATE_URL):
    responses.add(
        responses.POST,
        url,
        body=requests.exceptions.ConnectTimeout("Connection timed out"),
    )


def add_fx_mock(payload: dict, status: int = 200, url: str = FX_RATES_URL):
    """Register an FX rates response."""
    responses.add(responses.GET, url, json=payload, status=status)
