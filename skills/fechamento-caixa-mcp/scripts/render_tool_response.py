#!/usr/bin/env python3
"""Render PT-BR response templates for fechamento_caixa MCP tools."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

MAX_ITEMS = 5


def _get(data: dict[str, Any], key: str, default: str = "-") -> str:
    value = data.get(key)
    if value is None:
        return default
    text = str(value).strip()
    return text if text else default


def _channel_label(value: str) -> str:
    return {"cash": "Dinheiro", "pix": "PIX", "card": "Cartao"}.get(value, value)


def _status_label(value: str) -> str:
    return {
        "pending": "Pendente",
        "issued": "Emitido",
        "reviewed": "Conferido",
        "reviewed_with_difference": "Conferido com diferenca",
    }.get(value, value)


def _reason_label(value: str) -> str:
    return {
        "no_ledger_entry": "sem lancamento",
        "ambiguous_ledger_entries": "lancamentos duplicados",
        "no_correlation_code": "sem codigo LIS",
        "unknown_correlation_code": "codigo LIS desconhecido",
        "multiple_records": "varios registros para um lancamento",
    }.get(value, value)


def _extract_error(data: dict[str, Any]) -> tuple[str, str]:
    code = _get(data, "code", "UNKNOWN_ERROR")
    message = _get(data, "message", "Unknown error")

    error = data.get("error")
    if isinstance(error, dict):
        code = _get(error, "code", code)
        message = _get(error, "message", message)

    return code, message


def _suggested_action(code: str) -> str:
    mapping = {
        "NOT_FOUND": "Confirme o identificador com list_units.",
        "VALIDATION_ERROR": "Revise datas (YYYY-MM-DD) e filtros informados.",
        "CONFLICT": "Recarregue os registros elegiveis antes de tentar de novo.",
        "LABEL_ALREADY_ISSUED": "Reutilize a etiqueta ja emitida para o envelope.",
        "INTEGRITY_FAULT": "Acione o suporte: envelope e registros divergem.",
    }
    return mapping.get(code, "Revise os parametros e tente novamente.")


def _error_block(title: str, data: dict[str, Any]) -> str:
    code, message = _extract_error(data)
    return (
        f"❌ {title}\n"
        f"- Codigo: {code}\n"
        f"- Mensagem: {message}\n"
        f"➡️ Acao recomendada: {_suggested_action(code)}"
    )


def _bullets(items: list[Any], line: Any) -> list[str]:
    lines = [line(item) for item in items[:MAX_ITEMS] if isinstance(item, dict)]
    if len(items) > MAX_ITEMS:
        lines.append("...")
    return lines


def render_list_units(status: str, data: dict[str, Any]) -> str:
    if status == "error":
        return _error_block("Nao consegui listar as unidades.", data)

    items = data.get("items")
    if not isinstance(items, list) or len(items) == 0:
        return "🔎 Nenhuma unidade cadastrada."

    lines = ["🏥 Unidades ativas:"]
    lines.extend(
        _bullets(items, lambda unit: f"- {_get(unit, 'code')} - {_get(unit, 'name')}")
    )
    return "\n".join(lines)


def render_list_eligible_records(status: str, data: dict[str, Any]) -> str:
    if status == "error":
        return _error_block("Falha ao listar registros elegiveis.", data)

    items = data.get("items")
    channel = _channel_label(_get(data, "channel"))
    if not isinstance(items, list) or len(items) == 0 or status == "empty":
        return f"🔎 Nenhum registro de {channel} aguardando fechamento."

    header = (
        f"🧾 {channel}: {len(items)} registro(s) aguardando fechamento"
        f" | total R$ {_get(data, 'total_cash')}"
    )
    lines = [header]
    lines.extend(
        _bullets(
            items,
            lambda record: (
                f"- {_get(record, 'external_code')} | {_get(record, 'service_date')}"
                f" | R$ {_get(record, 'cash_component')}"
                f" | {_get(record, 'patient_name')}"
            ),
        )
    )
    return "\n".join(lines)


def render_list_review_envelopes(status: str, data: dict[str, Any]) -> str:
    if status == "error":
        return _error_block("Falha ao listar envelopes para conferencia.", data)

    items = data.get("items")
    if not isinstance(items, list) or len(items) == 0 or status == "empty":
        return "✅ Nenhum envelope aguardando conferencia."

    lines = [f"📬 Envelopes aguardando conferencia (total: {len(items)}):"]
    lines.extend(
        _bullets(
            items,
            lambda envelope: (
                f"- {_get(envelope, 'code')}"
                f" | {_channel_label(_get(envelope, 'channel'))}"
                f" | esperado R$ {_get(envelope, 'expected_cash')}"
                f" | diferenca R$ {_get(envelope, 'difference')}"
                + (" ⚠️" if envelope.get("has_difference") is True else "")
            ),
        )
    )
    return "\n".join(lines)


def render_get_review_stats(status: str, data: dict[str, Any]) -> str:
    if status == "error":
        return _error_block("Nao consegui calcular o painel de conferencia.", data)

    return (
        "📊 Painel de conferencia\n"
        f"- Pendentes: {_get(data, 'pending_count', '0')}"
        f" (R$ {_get(data, 'pending_value', '0.00')})\n"
        f"- Com diferenca: {_get(data, 'with_difference_count', '0')}"
        f" (R$ {_get(data, 'total_difference', '0.00')})\n"
        f"- Conferidos hoje: {_get(data, 'reviewed_today_count', '0')}"
    )


def render_get_envelope(status: str, data: dict[str, Any]) -> str:
    """Envelope label text: code, amounts and the linked LIS codes."""

    if status == "error":
        return _error_block("Nao consegui consultar o envelope.", data)

    codes = data.get("lis_codes")
    code_list = "-"
    if isinstance(codes, list) and codes:
        code_list = ", ".join(str(code) for code in codes)
    label = (
        f"emitida em {_get(data, 'label_issued_at')}"
        f" por {_get(data, 'label_issued_by')}"
        if data.get("label_issued_at")
        else "nao emitida"
    )
    lines = [
        f"✉️ Envelope {_get(data, 'code')}",
        f"- Canal: {_channel_label(_get(data, 'channel'))}",
        f"- Data: {_get(data, 'envelope_date')}",
        f"- Status: {_status_label(_get(data, 'status'))}",
        f"- Esperado: R$ {_get(data, 'expected_cash')}",
        f"- Contado: R$ {_get(data, 'counted_cash')}",
        f"- Diferenca: R$ {_get(data, 'difference')}",
        f"- Registros ({_get(data, 'record_count')}): {code_list}",
        f"🏷️ Etiqueta {label}",
    ]
    annotations = data.get("annotations")
    if isinstance(annotations, list) and annotations:
        lines.append("📝 Justificativas:")
        lines.extend(
            _bullets(
                annotations,
                lambda note: f"- {_get(note, 'created_by')}: {_get(note, 'text')}",
            )
        )
    return "\n".join(lines)


def render_get_reconciliation(status: str, data: dict[str, Any]) -> str:
    if status == "error":
        return _error_block("Nao consegui conciliar o periodo.", data)

    totals = data.get("totals")
    if not isinstance(totals, dict):
        totals = {}

    lines = [
        f"🏦 Conciliacao {_get(data, 'start_date')} a {_get(data, 'end_date')}",
        f"- Registros: {_get(totals, 'record_count', '0')}"
        f" (R$ {_get(totals, 'record_amount', '0.00')})",
        f"- Lancamentos: {_get(totals, 'transaction_count', '0')}"
        f" (R$ {_get(totals, 'transaction_amount', '0.00')})",
        f"- Conciliados: {_get(totals, 'matched_count', '0')}"
        f" (R$ {_get(totals, 'matched_amount', '0.00')})",
    ]

    lis_orphans = data.get("lis_orphans")
    if isinstance(lis_orphans, list) and lis_orphans:
        lines.append(f"⚠️ Registros sem lancamento ({len(lis_orphans)}):")
        lines.extend(
            _bullets(
                lis_orphans,
                lambda orphan: (
                    f"- {_get(orphan, 'correlation_code')}"
                    f" | R$ {_get(orphan, 'amount')}"
                    f" | {_reason_label(_get(orphan, 'reason'))}"
                ),
            )
        )

    ledger_orphans = data.get("ledger_orphans")
    if isinstance(ledger_orphans, list) and ledger_orphans:
        lines.append(f"⚠️ Lancamentos sem registro ({len(ledger_orphans)}):")
        lines.extend(
            _bullets(
                ledger_orphans,
                lambda orphan: (
                    f"- {_get(orphan, 'transaction_date')}"
                    f" | R$ {_get(orphan, 'amount')}"
                    f" | {_get(orphan, 'description')}"
                    f" | {_reason_label(_get(orphan, 'reason'))}"
                ),
            )
        )

    duplicates = data.get("duplicates")
    if isinstance(duplicates, list) and duplicates:
        lines.append(f"🔁 Codigos com lancamentos duplicados ({len(duplicates)}):")
        lines.extend(
            _bullets(
                duplicates,
                lambda duplicate: (
                    f"- {_get(duplicate, 'correlation_code')}"
                    f" | {_get(duplicate, 'occurrences')}x"
                    f" | R$ {_get(duplicate, 'total_amount')}"
                ),
            )
        )

    if len(lines) == 4:
        lines.append("✅ Nenhuma pendencia no periodo.")
    return "\n".join(lines)


RENDERERS = {
    "list_units": render_list_units,
    "list_eligible_records": render_list_eligible_records,
    "list_review_envelopes": render_list_review_envelopes,
    "get_review_stats": render_get_review_stats,
    "get_envelope": render_get_envelope,
    "get_reconciliation": render_get_reconciliation,
}


def render(tool: str, status: str, data: dict[str, Any]) -> str:
    renderer = RENDERERS.get(tool)
    if renderer is None:
        raise ValueError(f"Unsupported tool: {tool}")
    return renderer(status, data)


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--tool", required=True, choices=sorted(RENDERERS))
    parser.add_argument(
        "--status", default="success", choices=["success", "error", "empty"]
    )
    parser.add_argument("--json", required=True, dest="json_path")
    args = parser.parse_args()

    payload = json.loads(Path(args.json_path).read_text(encoding="utf-8"))
    output = render(args.tool, args.status, payload)
    print(output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
