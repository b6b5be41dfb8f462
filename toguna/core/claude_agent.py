"""Claude integration for roleplay training and talk-script suggestions."""

import json
import logging
from typing import Any

from anthropic import Anthropic, APIError

from toguna.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

PROSPECT_SYSTEM_PROMPT = """あなたは日本企業の担当者として、テレアポ営業の電話を受ける見込み客を演じます。
営業オペレーターの練習相手です。

## ルール
- 常に見込み客として、自然な日本語の話し言葉で1〜3文で返答する
- 営業側の発言や解説は絶対にしない
- シナリオと難易度に応じて、関心・迷い・断り文句を織り交ぜる
- 難易度 easy: 協力的で話を聞いてくれる
- 難易度 normal: 忙しく、メリットが明確なら話を聞く
- 難易度 hard: 懐疑的で、価格・時期・競合を理由に何度も断ろうとする"""

COACH_SYSTEM_PROMPT = """あなたはコールセンターの営業トレーナーです。
ロールプレイの会話記録を読み、オペレーターの営業トークを評価します。
評価は具体的かつ前向きに、日本語で行ってください。"""

SCENARIO_LABELS = {
    "cold_call": "新規開拓の架電",
    "follow_up": "資料送付後のフォローアップ",
    "objection_handling": "断り文句への切り返し",
    "closing": "アポイント獲得のクロージング",
}

SCENARIO_OPENERS = {
    "cold_call": "はい、お電話ありがとうございます。どちら様でしょうか？",
    "follow_up": "ああ、先日資料をいただいた件ですね。まだしっかり目を通せていないんですが。",
    "objection_handling": "すみません、今は特に困っていないので、結構です。",
    "closing": "お話はだいたい分かりました。それで、具体的にはどうすればいいんですか？",
}

CANNED_REPLIES = [
    "そうですね、その点についてもう少し詳しくお聞きしてもよろしいですか？",
    "なるほど。ただ、今すぐ必要かと言われると少し迷いますね。",
    "費用はどのくらいかかるんでしょうか？",
    "他社さんからも似たような提案を受けているんですよ。",
    "社内で検討してみないと何とも言えないですね。",
]

NEWS_TALK_TEMPLATES = {
    "funding": ("このたびの資金調達、おめでとうございます。事業拡大のタイミングで、営業体制の強化についてお役に立てる情報をお持ちしました。", "congratulatory"),
    "executive_change": ("新体制への移行、おめでとうございます。新しい方針づくりの参考として、同業他社の取り組み事例をご紹介させてください。", "respectful"),
    "expansion": ("新拠点の開設を拝見しました。立ち上げ期の集客や人員体制について、お手伝いできることがあると思いご連絡しました。", "proactive"),
    "award": ("受賞のニュースを拝見しました。おめでとうございます。さらなる認知拡大に向けた施策について、少しお話しできればと思います。", "congratulatory"),
    "partnership": ("業務提携の発表を拝見しました。新しい取り組みに合わせて、営業面で連携できることがないかご相談させてください。", "collaborative"),
    "ipo": ("上場に向けたご準備、拝見しております。管理体制の強化と並行して、売上基盤づくりのお手伝いができればと考えております。", "respectful"),
    "product_launch": ("新サービスのリリース、拝見しました。立ち上げ期の販路開拓について、お役に立てるご提案がございます。", "proactive"),
    "other": ("最近の御社の取り組みを拝見し、お役に立てる情報があると思いご連絡いたしました。", "neutral"),
}

_QUESTION_MARKS = ("?", "？")


def extract_json(content: str) -> dict[str, Any] | None:
    """Pull the first JSON object out of a model response."""
    start = content.find("{")
    end = content.rfind("}") + 1
    if start == -1 or end <= start:
        return None
    try:
        return json.loads(content[start:end])
    except json.JSONDecodeError:
        return None


def canned_reply(turn_index: int) -> str:
    return CANNED_REPLIES[turn_index % len(CANNED_REPLIES)]


def heuristic_feedback(conversation: list[dict]) -> dict[str, Any]:
    """Score a roleplay from its shape when no model is available."""
    operator_turns = [t["content"] for t in conversation if t.get("role") == "operator"]
    turns = len(operator_turns)
    average_length = sum(len(t) for t in operator_turns) / turns if turns else 0
    asked_questions = any(mark in t for t in operator_turns for mark in _QUESTION_MARKS)

    score = 50 + min(turns, 5) * 4
    positive, improve = [], []

    if asked_questions:
        score += 10
        positive.append("質問で相手のニーズを引き出せている")
    else:
        improve.append("質問を増やして相手の状況をヒアリングする")

    if average_length >= 30:
        score += 10
        positive.append("説明が具体的で分かりやすい")
    else:
        improve.append("メリットを具体例とともに伝える")

    if turns >= 3:
        positive.append("会話を継続できている")
    else:
        improve.append("会話を途中で終わらせず、次のアクションまでつなげる")

    if not improve:
        improve.append("クロージングの一言をより明確にする")

    return {
        "performance_score": max(0, min(100, score)),
        "positive_points": positive,
        "improvement_areas": improve,
    }


class ClaudeAgent:
    """Claude-backed roleplay partner, coach and talk-script writer."""

    def __init__(self):
        self.client = Anthropic(api_key=settings.anthropic_api_key) if settings.anthropic_api_key else None
        self.model = settings.claude_model

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    def _complete(self, system: str, messages: list[dict], max_tokens: int = 1024) -> str:
        if not self.is_configured:
            raise ValueError("Anthropic API key not configured")
        response = self.client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            system=system,
            messages=messages,
        )
        return response.content[0].text

    async def prospect_reply(
        self,
        scenario: str,
        difficulty: str,
        conversation: list[dict],
        product_name: str | None = None,
    ) -> str:
        """Next line from the simulated prospect."""
        operator_turns = sum(1 for t in conversation if t.get("role") == "operator")
        if not self.is_configured:
            return canned_reply(operator_turns - 1)

        context = (
            f"シナリオ: {SCENARIO_LABELS.get(scenario, scenario)}\n"
            f"難易度: {difficulty}\n"
            f"営業商材: {product_name or '営業支援サービス'}"
        )
        messages = []
        for turn in conversation:
            role = "user" if turn.get("role") == "operator" else "assistant"
            if messages and messages[-1]["role"] == role:
                messages[-1]["content"] += f"\n{turn['content']}"
            else:
                messages.append({"role": role, "content": turn["content"]})
        if messages and messages[0]["role"] == "assistant":
            messages.insert(0, {"role": "user", "content": "（電話がつながりました）"})

        try:
            return self._complete(f"{PROSPECT_SYSTEM_PROMPT}\n\n{context}", messages, max_tokens=300).strip()
        except APIError as e:
            logger.warning(f"Roleplay reply failed, using canned reply: {e}")
            return canned_reply(operator_turns - 1)

    async def roleplay_feedback(self, scenario: str, difficulty: str, conversation: list[dict]) -> dict[str, Any]:
        """Evaluate a finished roleplay; falls back to a heuristic score."""
        if not self.is_configured:
            return heuristic_feedback(conversation)

        transcript = "\n".join(
            f"{'オペレーター' if t.get('role') == 'operator' else '見込み客'}: {t['content']}"
            for t in conversation
        )
        prompt = f"""以下のロールプレイを評価してください。

シナリオ: {SCENARIO_LABELS.get(scenario, scenario)}
難易度: {difficulty}

会話記録:
{transcript}

JSON形式で回答してください:
{{
    "performance_score": 0-100の整数,
    "positive_points": ["..."],
    "improvement_areas": ["..."]
}}"""

        try:
            content = self._complete(COACH_SYSTEM_PROMPT, [{"role": "user", "content": prompt}])
        except APIError as e:
            logger.warning(f"Roleplay feedback failed, using heuristic: {e}")
            return heuristic_feedback(conversation)

        data = extract_json(content)
        if data is None or "performance_score" not in data:
            return heuristic_feedback(conversation)

        try:
            score = int(data["performance_score"])
        except (TypeError, ValueError):
            return heuristic_feedback(conversation)
        return {
            "performance_score": max(0, min(100, score)),
            "positive_points": list(data.get("positive_points") or []),
            "improvement_areas": list(data.get("improvement_areas") or []),
        }

    async def suggest_talk(
        self,
        trigger_type: str,
        headline: str,
        summary: str | None = None,
        company_name: str | None = None,
    ) -> tuple[str, str]:
        """Opening talk script for a news trigger, as (talk, tone)."""
        template, tone = NEWS_TALK_TEMPLATES.get(trigger_type, NEWS_TALK_TEMPLATES["other"])
        if not self.is_configured:
            return template, tone

        prompt = f"""テレアポのオペレーターが、以下のニュースをきっかけに電話をかけます。
冒頭30秒で話す自然なトークスクリプトを作成してください。

企業名: {company_name or '不明'}
ニュース種別: {trigger_type}
見出し: {headline}
概要: {summary or 'なし'}

JSON形式で回答してください:
{{
    "talk": "...",
    "tone": "congratulatory | respectful | proactive | collaborative | neutral"
}}"""

        try:
            content = self._complete(COACH_SYSTEM_PROMPT, [{"role": "user", "content": prompt}])
        except APIError as e:
            logger.warning(f"Talk suggestion failed, using template: {e}")
            return template, tone

        data = extract_json(content)
        if not data or not data.get("talk"):
            return template, tone
        return data["talk"], data.get("tone") or tone


_agent: ClaudeAgent | None = None


async def get_claude_agent() -> ClaudeAgent:
    """Get the singleton Claude agent instance."""
    global _agent
    if _agent is None:
        _agent = ClaudeAgent()
    return _agent
