from typing import Protocol


class ContactNotifier(Protocol):
    async def send_email(self, address: str, code: str) -> str:
        ...

    async def send_sms(self, number: str, code: str) -> str:
        ...
