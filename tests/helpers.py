from typing import Callable
from unittest import mock

import requests


INSTALLATION_JSON = """{
  "id": 204,
  "location": {
    "latitude": 50.062006,
    "longitude": 19.940984
  },
  "address": {
    "country": "Poland",
    "city": "Kraków",
    "street": "Mikołajska",
    "number": "4B",
    "displayAddress1": "Kraków",
    "displayAddress2": "Mikołajska"
  },
  "elevation": 220.38,
  "airly": true,
  "sponsor": {
    "name": "KrakówOddycha",
    "description": "Sensor Airly w ramach akcji",
    "logo": "https://cdn.airly.org/logo/KrakówOddycha.jpg",
    "link": "https://przykladowy_link_do_strony_sponsora.pl"
  }
}"""

MEASUREMENTS_JSON = """{
  "current": {
    "fromDateTime": "2018-08-24T08:24:48.652Z",
    "tillDateTime": "2018-08-24T09:24:48.652Z",
    "values": [
      { "name": "PM1",  "value": 12.73 },
      { "name": "PM25", "value": 18.7 }
    ],
    "indexes": [
      {
        "name": "AIRLY_CAQI",
        "value": 35.53,
        "level": "LOW",
        "description": "Dobre powietrze.",
        "advice": "Możesz bez obaw wyjść na zewnątrz.",
        "color": "#D1CF1E"
      }
    ],
    "standards": [
      {
        "name": "WHO",
        "pollutant": "PM25",
        "limit": 25,
        "percent": 74.81
      }
    ]
  },
  "history": [],
  "forecast": []
}"""


def make_response(status_code: int, body: str) -> requests.Response:
    """Buduje prawdziwy obiekt requests.Response z podaną treścią."""
    response = requests.Response()
    response.status_code = status_code
    response._content = body.encode("utf-8")
    response._content_consumed = True
    response.encoding = "utf-8"
    response.close = mock.Mock(wraps=response.close)
    return response


class StubTransport:
    """Transport zapisujący wysłane żądania i zwracający odpowiedzi z handlera."""

    def __init__(self, handler: Callable[[requests.PreparedRequest], requests.Response]):
        self.handler = handler
        self.requests: list[requests.PreparedRequest] = []
        self.responses: list[requests.Response] = []

    def send(self, request: requests.PreparedRequest, **kwargs) -> requests.Response:
        self.requests.append(request)
        response = self.handler(request)
        self.responses.append(response)
        return response

    @property
    def last_request(self) -> requests.PreparedRequest:
        return self.requests[-1]


def respond_with(status_code: int, body: str) -> StubTransport:
    return StubTransport(lambda request: make_response(status_code, body))


