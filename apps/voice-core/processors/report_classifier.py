import re

# First matching category wins, in this order
REPORT_CATEGORIES = {
    "harassment": ["harassment", "harass", "bullying", "hostile", "inappropriate", "sexual", "unwanted"],
    "fraud": ["fraud", "money", "steal", "embezzle", "financial", "accounting", "budget", "expense"],
    "safety": ["safety", "unsafe", "danger", "accident", "injury", "hazard", "equipment", "workplace"],
    "discrimination": ["discrimination", "discriminate", "racial", "gender", "age", "bias", "unfair"],
    "corruption": ["corruption", "corrupt", "bribe", "kickback", "favor", "influence", "payoff"],
    "retaliation": ["retaliation", "revenge", "punish", "fired", "demoted", "threatened"],
}

CRITICAL_KEYWORDS = ["urgent", "emergency", "immediate", "critical", "danger", "threat", "violence", "suicide", "death"]
HIGH_KEYWORDS = ["serious", "important", "significant", "major", "concern", "violation", "illegal", "criminal"]
LOW_KEYWORDS = ["minor", "small", "suggestion", "recommendation"]

DEFAULT_TITLE = "Voice Report"
MAX_TITLE_LENGTH = 80
MAX_SUMMARY_LENGTH = 300


class ReportClassifier:
    """Keyword heuristics that give a voice report a title, category and priority"""

    @staticmethod
    def categorize(content: str) -> str:
        text = (content or "").lower()
        for category, keywords in REPORT_CATEGORIES.items():
            if any(keyword in text for keyword in keywords):
                return category
        return "other"

    @staticmethod
    def prioritize(content: str) -> str:
        text = (content or "").lower()
        if any(keyword in text for keyword in CRITICAL_KEYWORDS):
            return "critical"
        if any(keyword in text for keyword in HIGH_KEYWORDS):
            return "high"
        if any(keyword in text for keyword in LOW_KEYWORDS):
            return "low"
        return "medium"

    @staticmethod
    def extract_title(content: str) -> str:
        """First sentence longer than 10 characters, truncated to 80"""
        if not content:
            return DEFAULT_TITLE

        sentences = [s.strip() for s in re.split(r"[.!?]+", content) if len(s.strip()) > 10]
        if not sentences:
            return DEFAULT_TITLE

        title = sentences[0]
        if len(title) > MAX_TITLE_LENGTH:
            return title[:MAX_TITLE_LENGTH - 3] + "..."
        return title

    @staticmethod
    def summarize_transcript(transcript: str) -> str:
        """Fallback summary: the first four sentences, at most 300 characters"""
        if not transcript:
            return ""

        sentences = [s.strip() for s in re.split(r"[.!?]+", transcript) if s.strip()]
        summary = ". ".join(sentences[:4]).strip()

        if len(summary) > MAX_SUMMARY_LENGTH:
            return summary[:MAX_SUMMARY_LENGTH - 3] + "..."
        return summary
