import json
import logging

from flask import current_app
from openai import OpenAI

logger = logging.getLogger(__name__)

RULES_SYSTEM_PROMPT = (
    "You are an expert at converting natural language customer descriptions into "
    "structured database query rules. Always respond with valid JSON only."
)

RULES_PROMPT = """Convert the following natural language description into structured customer segment rules.

Description: "{description}"

Available fields and their types:
- totalSpend (numeric): Customer's total spending amount
- visitCount (numeric): Number of visits/orders
- lastOrderDate (date): expressed as "days since last order"
- segment (text): Customer segment (vip, regular, new)

Available operators: >, >=, <, <=, =, !=

Convert common phrases:
- "high spenders" or "spent over X" -> totalSpend > X
- "inactive" or "haven't shopped in X days/months" -> lastOrderDate > X, in days
- "frequent customers" or "visited more than X times" -> visitCount > X
- "new customers" -> segment = "new"
- "VIP customers" -> segment = "vip"

Rules are connected with AND/OR logic. The last rule has no connector.

Return a JSON object with this exact structure:
{{"rules": [{{"field": "totalSpend", "operator": ">", "value": "10000", "connector": "AND"}}]}}
"""

MESSAGES_SYSTEM_PROMPT = (
    "You are an expert marketing copywriter specializing in personalized customer messaging. "
    "Always respond with valid JSON only."
)

MESSAGES_PROMPT = """Generate 3 different message variants for a marketing campaign.

Campaign Objective: "{objective}"
Audience: {audience}

Every message must include the personalization placeholder {{{{name}}}}, suit the objective,
use a different tone, stay concise and end with a clear call-to-action.

Return a JSON object with this exact structure:
{{"messages": [{{"id": "variant1", "style": "Friendly", "message": "Hi {{{{name}}}}, ..."}}]}}
"""

INSIGHTS_SYSTEM_PROMPT = (
    "You are a marketing analytics expert who provides clear, actionable insights about campaign performance."
)


class AIResponseError(Exception):
    """The model answered, but not in the shape we asked for."""
    pass


def _client():
    api_key = current_app.config.get("OPENAI_API_KEY")
    if not api_key:
        raise AIResponseError("OPENAI_API_KEY is not configured")
    return OpenAI(api_key=api_key)


def _complete(system_prompt, prompt, temperature, json_mode=True):
    kwargs = {}
    if json_mode:
        kwargs["response_format"] = {"type": "json_object"}

    response = _client().chat.completions.create(
        model=current_app.config.get("OPENAI_MODEL", "gpt-4o"),
        messages=[
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": prompt}
        ],
        temperature=temperature,
        **kwargs
    )
    content = response.choices[0].message.content or ""
    return json.loads(content or "{}") if json_mode else content.strip()


# -------------------- RULES --------------------

def _clean_rules(raw_rules):
    if not isinstance(raw_rules, list) or not raw_rules:
        raise AIResponseError("Invalid rules format from AI")

    rules = []
    for raw in raw_rules:
        if not isinstance(raw, dict) or not all(k in raw for k in ("field", "operator", "value")):
            raise AIResponseError(f"Malformed rule from AI: {raw}")
        rule = {"field": str(raw["field"]), "operator": str(raw["operator"]), "value": str(raw["value"])}
        if raw.get("connector") in ("AND", "OR"):
            rule["connector"] = raw["connector"]
        rules.append(rule)

    rules[-1].pop("connector", None)
    return rules


def fallback_rules(description):
    rules = []
    text = description.lower()

    if "spent" in text and "10" in text:
        rules.append({"field": "totalSpend", "operator": ">", "value": "10000"})

    if "inactive" in text or "haven't" in text:
        if rules:
            rules[-1]["connector"] = "OR"
        rules.append({"field": "lastOrderDate", "operator": ">", "value": "90"})

    if not rules:
        rules.append({"field": "totalSpend", "operator": ">", "value": "0"})
    return rules


def convert_rules(description):
    try:
        result = _complete(RULES_SYSTEM_PROMPT, RULES_PROMPT.format(description=description), temperature=0.3)
        return _clean_rules(result.get("rules"))
    except Exception as e:
        logger.warning("Rule conversion fell back to defaults: %s", e)
        return fallback_rules(description)


# -------------------- MESSAGES --------------------

def fallback_messages(objective):
    text = objective.lower()
    opener = "we miss you! Come back and " if "back" in text else ""
    offer = "Limited time discount" if "discount" in text else "Exclusive offer"
    return [
        {"id": "variant1", "style": "Friendly",
         "message": f"Hi {{{{name}}}}, {opener}enjoy special offers just for you!"},
        {"id": "variant2", "style": "Urgent",
         "message": f"{{{{name}}}}, don't miss out! {offer} available now."},
        {"id": "variant3", "style": "Personal",
         "message": "Hey {{name}}! We have something special for you based on your preferences. Check it out!"}
    ]


def generate_messages(objective, audience_description=None):
    try:
        prompt = MESSAGES_PROMPT.format(objective=objective, audience=audience_description or "General customers")
        result = _complete(MESSAGES_SYSTEM_PROMPT, prompt, temperature=0.7)
        messages = result.get("messages")
        if not isinstance(messages, list) or not messages:
            raise AIResponseError("Invalid messages format from AI")

        variants = []
        for index, item in enumerate(messages, start=1):
            if not isinstance(item, dict) or not item.get("message"):
                raise AIResponseError(f"Malformed message variant from AI: {item}")
            variants.append({
                "id": str(item.get("id") or f"variant{index}"),
                "style": str(item.get("style") or "Default"),
                "message": str(item["message"])
            })
        return variants
    except Exception as e:
        logger.warning("Message generation fell back to defaults: %s", e)
        return fallback_messages(objective)


# -------------------- INSIGHTS --------------------

def _delivery_rate(stats):
    sent = stats["sent"] + stats["delivered"] + stats["failed"]
    return (stats["delivered"] / sent) * 100 if sent > 0 else 0


def fallback_insights(campaign, stats):
    return (
        f"Your {campaign.type} campaign reached {campaign.audience_size:,} customers. "
        f"{stats['delivered']:,} messages were successfully delivered with a "
        f"{_delivery_rate(stats):.1f}% delivery rate."
    )


def campaign_insights(campaign, stats):
    prompt = (
        "Generate a human-readable insight summary for this campaign performance:\n\n"
        f"Campaign Type: {campaign.type}\n"
        f"Total Audience: {campaign.audience_size}\n"
        f"Messages Sent: {stats['sent'] + stats['delivered'] + stats['failed']}\n"
        f"Successfully Delivered: {stats['delivered']}\n"
        f"Failed Deliveries: {stats['failed']}\n"
        f"Delivery Rate: {_delivery_rate(stats):.1f}%\n\n"
        "Cover overall performance, delivery rate, recommendations, and compare to an "
        "industry standard of 90-95%. Keep it concise. Return plain text, not JSON."
    )
    try:
        text = _complete(INSIGHTS_SYSTEM_PROMPT, prompt, temperature=0.5, json_mode=False)
        return text or fallback_insights(campaign, stats)
    except Exception as e:
        logger.warning("Campaign insights fell back to summary: %s", e)
        return fallback_insights(campaign, stats)
