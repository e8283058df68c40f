"""
Client notices sent by the reconciliation passes.

Each builder returns a ``Notice`` for one contract.  The contract is named
by its number, or by its id while it has none; dates are ``dd.MM.yyyy``.
Wording is the agency's Russian correspondence.
"""

from __future__ import annotations

from dataclasses import dataclass

from insurance_kernel.domain.contract import Contract
from insurance_kernel.domain.parties import Client

_SIGNATURE = "С уважением,\nСтраховое агентство"


@dataclass(frozen=True)
class Notice:
    subject: str
    body: str


def _greeting(client: Client | None) -> str:
    name = client.full_name if client is not None and client.full_name else "Клиент"
    return f"Уважаемый(ая) {name}!"


def _letter(client: Client | None, *lines: str) -> str:
    return "\n\n".join([_greeting(client), "\n".join(lines), _SIGNATURE]) + "\n"


def overdue_notice(contract: Contract, client: Client | None) -> Notice:
    number = contract.display_number
    return Notice(
        subject=f"Договор {number} просрочен",
        body=_letter(
            client,
            f"Ваш договор страхования {number} просрочен.",
            f"Дата окончания: {contract.end_date:%d.%m.%Y}",
            "Пожалуйста, свяжитесь с нами для решения вопроса о продлении договора.",
        ),
    )


def unpaid_notice(contract: Contract, client: Client | None, threshold_days: int) -> Notice:
    number = contract.display_number
    return Notice(
        subject=f"Требуется оплата договора {number}",
        body=_letter(
            client,
            f"Ваш договор страхования {number} не оплачен более {threshold_days} дней.",
            f"Сумма к оплате: {contract.premium.amount} {contract.premium.currency}",
            "Пожалуйста, произведите оплату в ближайшее время.",
        ),
    )


def renewal_notice(contract: Contract, client: Client | None, window_days: int) -> Notice:
    number = contract.display_number
    return Notice(
        subject=f"Напоминание: договор {number} заканчивается через {window_days} дней",
        body=_letter(
            client,
            f"Напоминаем, что ваш договор страхования {number} "
            f"заканчивается {contract.end_date:%d.%m.%Y}.",
            "Для продления договора, пожалуйста, свяжитесь с нашим агентством.",
        ),
    )


def expired_notice(contract: Contract, client: Client | None) -> Notice:
    number = contract.display_number
    return Notice(
        subject=f"Договор {number} истек",
        body=_letter(
            client,
            f"Ваш договор страхования {number} истек {contract.end_date:%d.%m.%Y}.",
            "Если вы хотите продлить договор, пожалуйста, свяжитесь с нашим агентством.",
        ),
    )
