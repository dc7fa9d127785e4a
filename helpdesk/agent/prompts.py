"""
Canned texts used by the agents and orchestrators.
"""

# Auto-reply knowledge base: exact intent key -> response
KNOWLEDGE_BASE = {
    "password_reset": (
        "To reset your password, please visit our password reset page at [URL]. "
        "Enter your email address and follow the instructions sent to your inbox."
    ),
    "refund_policy": (
        "Our refund policy allows for full refunds within 30 days of purchase. "
        "Please provide your order number and reason for the refund request."
    ),
    "technical_support": (
        "For technical issues, please provide: 1) Error messages, 2) Steps to reproduce, "
        "3) Your system information. Our team will investigate promptly."
    ),
}

# Fallback replies for detected intents that have no knowledge base entry
INTENT_REPLIES = {
    "information_request": (
        "Thank you for your inquiry. Our support team will review your question "
        "and respond within 24 hours."
    ),
    "bug_report": (
        "Thank you for reporting this issue. We have logged it with our development team "
        "who will investigate. You can track the progress on this issue."
    ),
    "feature_request": (
        "Thank you for your feature suggestion! We value user feedback and will consider "
        "this for our roadmap. The team will review and update this issue with our decision."
    ),
}

ROOT_QUESTION = "How should we handle support request: {subject}?"

BASE_QUESTIONS = [
    "What is the primary intent of this request?",
    "What category does this request belong to?",
    "What is the urgency level?",
    "Is this a known issue with existing solution?",
    "Can this be handled automatically?",
    "What resources are needed to resolve this?",
    "What is the estimated resolution time?",
    "Should this be escalated to human support?",
]

# (trigger keywords, follow-up questions)
CONDITIONAL_QUESTIONS = [
    (("bug", "error"), [
        "What is the severity of this bug?",
        "Can we reproduce this issue?",
    ]),
    (("payment", "billing"), [
        "Is this a billing dispute?",
        "Does this require financial team involvement?",
    ]),
    (("security", "breach"), [
        "Is this a security incident?",
        "Should we trigger security protocols?",
    ]),
]

RECOMMENDATION_HIGH = "High confidence - proceed with automated response"
RECOMMENDATION_MEDIUM = "Medium confidence - suggest automated response with human review"
RECOMMENDATION_LOW = "Low confidence - escalate to human support"

ANALYSIS_COMMENT = """## 🤖 Automated Analysis

**Triage:** {categories}
**Priority:** {priority}
**Intent:** {intent}
**Summary:** {summary}

**Action:** {final_action}
**Requires Human Review:** {requires_review}
{review_note}"""

REVIEW_NOTE = "\n⚠️ This ticket requires human review before automated actions can be taken."

GRAPH_ANALYSIS_COMMENT = """## 🤖 Question Graph Analysis

**Consensus Level:** {consensus:.1f}%
**Recommendation:** {recommendation}

### Decision Graph
- Total Nodes: {node_count}
- Execution Steps: {step_count}

### Key Decisions
{key_decisions}

{verdict}"""

LOW_CONSENSUS_VERDICT = "⚠️ Low consensus - human review recommended"
HIGH_CONSENSUS_VERDICT = "✅ High consensus - automated handling approved"
