class APIError(IOError):
    """
    Wyjątek reprezentujący odpowiedź API Airly ze statusem innym niż 200.

    Zawiera szczegółowe informacje o odpowiedzi:
    - kod statusu HTTP (`status_code`),
    - surową treść odpowiedzi (`body`).
    """

    def __init__(self, status_code: int, body: str):
        super().__init__(f"{status_code}: {body}")
        self.status_code = status_code
        self.body = body

    def __str__(self):
        return f"{self.status_code}: {self.body}"

class TooManyRequests(APIError):
    """
    Wyjątek reprezentujący przekroczenie limitu zapytań API Airly (HTTP 429)
    """
    pass

class DecodeError(ValueError):
    """
    Wyjątek zgłaszany gdy treści odpowiedzi nie da się zdekodować do oczekiwanego modelu
    """
    pass
