"""User-facing text produced by the risk engine.

The app's users are Japanese-speaking; factor strings are also stored
with each assessment, so changing them changes persisted data.
"""
from typing import Dict

from wellwatch.shared.models import RiskLevel


class FallFactor:
    STEP_DECLINE = "急激な活動量の減少"
    IRREGULAR_PATTERN = "不規則な活動パターン"
    LOW_ACTIVITY = "全体的な活動量不足"


class FrailtyFactor:
    VERY_LOW_ACTIVITY = "極めて低い活動量"
    LOW_ACTIVITY = "低い活動量"
    DECLINING_TREND = "活動量の減少傾向"
    FEW_ACTIVE_DAYS = "活動日数が少ない"
    SOMEWHAT_FEW_ACTIVE_DAYS = "活動日数がやや少ない"
    LOW_GOAL_ACHIEVEMENT = "目標達成率が低い"


class MentalHealthFactor:
    PERSISTENT_NEGATIVE_MOOD = "継続的なネガティブ気分"
    MOOD_DECLINE = "気分の低下傾向"
    LOW_APP_USAGE = "アプリ利用頻度が低い"
    SOMEWHAT_LOW_APP_USAGE = "アプリ利用頻度がやや低い"
    FEW_SOCIAL_CONNECTIONS = "社会的つながりが少ない"


class Recommendation:
    FALL_HIGH = "転倒予防のため、規則的な歩行習慣を心がけてください"
    FALL_IRREGULAR = "毎日同じ時間帯に散歩をすることをお勧めします"
    FALL_MEDIUM = "歩行時は無理をせず、安全な環境で活動してください"
    FRAILTY_HIGH = "筋力維持のため、少しずつ活動量を増やしましょう"
    FRAILTY_FEW_ACTIVE_DAYS = "週に最低3日は軽い運動を心がけてください"
    FRAILTY_MEDIUM = "現在の活動レベルを維持し、徐々に歩数を増やしてみましょう"
    MENTAL_HIGH = "気分の記録を続けて、心の健康を見守りましょう"
    MENTAL_LOW_ENGAGEMENT = "アプリの機能を活用して、日々の気分を記録してください"
    MAINTAIN_ACTIVITY = "現在の活動レベルを維持してください"
    CONTINUE_CHECKS = "定期的な健康チェックを続けましょう"


RISK_DESCRIPTIONS: Dict[RiskLevel, Dict[str, str]] = {
    RiskLevel.LOW: {
        "overall": "現在の健康状態は良好です。この調子で生活習慣を維持しましょう。",
        "fall": "転倒リスクは低い状態です。現在の運動習慣を継続してください。",
        "frailty": "フレイルのリスクは低く、身体機能が維持されています。",
        "mentalHealth": "メンタルヘルスは良好な状態です。",
    },
    RiskLevel.MEDIUM: {
        "overall": "健康状態に注意が必要です。生活習慣の見直しを検討しましょう。",
        "fall": "転倒リスクがやや高まっています。バランス運動を取り入れましょう。",
        "frailty": "フレイルの兆候があります。適度な運動と栄養管理を心がけましょう。",
        "mentalHealth": "メンタルヘルスに注意が必要です。十分な休息を取りましょう。",
    },
    RiskLevel.HIGH: {
        "overall": "健康状態が心配です。医療専門家への相談をお勧めします。",
        "fall": "転倒リスクが高い状態です。安全な環境作りと専門家への相談を検討してください。",
        "frailty": "フレイルのリスクが高いです。医師と相談して対策を立てましょう。",
        "mentalHealth": "メンタルヘルスのケアが必要です。専門家のサポートを受けることをお勧めします。",
    },
}


def describe_risk(level: RiskLevel, domain: str = "overall") -> str:
    """Return the description for a level in ``domain``.

    ``domain`` is "overall" or a ``RiskType`` value; unknown domains
    give an empty string.
    """
    return RISK_DESCRIPTIONS[level].get(domain, "")
