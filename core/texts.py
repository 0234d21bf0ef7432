# ghost/core/texts.py
"""
User-facing message texts (Portuguese, as shown on the server).
"""
from typing import List, Sequence

from invite_system.services.inviter_counter import LeaderboardEntry
from invite_system.services.rank_engine import RankSummary

ERROR_GENERIC = "Erro ao executar o comando."
ERROR_INVALID_GUILD = "Servidor inválido."
ERROR_INVITE_UNAVAILABLE = "Não consegui criar seu link agora. Tente novamente em instantes."


def next_tier_line(summary: RankSummary) -> str:
    if summary.next_tier:
        return f"🚀 **Próximo:** {summary.nextTierName} (faltam **{summary.missing}**)"
    return "💎 **Topo:** DIAMANTE"


def rank_text(summary: RankSummary) -> str:
    return (
        f"👻 **Seu Rank: {summary.tierName}**\n"
        f"📌 **Convites reais:** {summary.count}\n"
        f"{next_tier_line(summary)}"
    )


def personal_link_text(invite_url: str) -> str:
    return f"🔗 **Seu link pessoal:** {invite_url}\n📌 Use **/rank** pra ver sua progressão."


def progress_text(invite_url: str) -> str:
    return "\n".join([
        "🚀 **Aqui nasce sua progressão.**",
        "",
        f"🔗 **Seu link pessoal:** {invite_url}",
        "",
        "Cada pessoa **REAL** que entrar por ele:",
        "• Conta no ranking",
        "• Desbloqueia cargos",
        "• Abre novos canais",
        "",
        "⛔ Convites falsos são removidos automaticamente.",
        "",
        "📌 Use **/rank** pra ver seu progresso.",
    ])


VERIFY_TITLE = "✅ Verificação obrigatória"
VERIFY_BUTTON_LABEL = "LIBERAR ACESSO"


def verify_description() -> str:
    return "\n".join([
        "Para liberar acesso ao conteúdo, convites e ranking, você precisa se verificar.",
        "",
        "**Sem verificação você fica sem:**",
        "• Acesso aos canais",
        "• Convites",
        "• Ranking / Progressão",
        "",
        "👇 Clique no botão abaixo para liberar sua entrada.",
    ])


def leaderboard_text(entries: Sequence[LeaderboardEntry]) -> str:
    lines: List[str] = [
        f"#{position} <@{entry.user_id}> — **{entry.count}**"
        for position, entry in enumerate(entries, start=1)
    ]
    return "\n".join(lines)


def weekly_report_text(summary: RankSummary, leaderboard: str) -> str:
    if summary.next_tier:
        next_line = f"🚀 Próximo: **{summary.nextTierName}** (faltam **{summary.missing}**)"
    else:
        next_line = "💎 Você está no topo: **DIAMANTE**"
    return (
        "📊 **Relatório semanal**\n"
        f"✅ Seus convites reais: **{summary.count}**\n"
        f"🏷️ Seu rank: **{summary.tierName}**\n"
        f"{next_line}"
        f"\n\n🏆 **Top 10 do servidor:**\n{leaderboard}"
    )
