"""Placeholder value map built from a merged configuration and id map."""

import json
from collections.abc import Mapping
from typing import Any

from mailwright.merging.models import MergedConfiguration, TenantProfile
from mailwright.naming import label_placeholder_key
from mailwright.observability.logging import get_logger

logger = get_logger(__name__)


def _json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, sort_keys=True)


def _signature(config: MergedConfiguration, tenant: TenantProfile) -> str | None:
    signature = config.behavior.signature
    if signature is None:
        return None
    lines = [signature.closing_text, tenant.business_name or "", signature.signature_block]
    return "\n".join(line for line in lines if line)


def build_placeholder_values(
    config: MergedConfiguration,
    id_map: Mapping[str, str],
    tenant: TenantProfile | None = None,
) -> dict[str, str | None]:
    """Map every known substitution key to its value.

    A None value marks a key the configuration has no value for; the
    injector substitutes the empty marker there. Each taxonomy path gets a
    LABEL_<KEY> entry holding its remote id, None when the path has not
    been reconciled yet. A path whose key is reserved (LABEL_MAP) or taken
    by an earlier path gets no entry of its own; the collision is logged and
    the id stays reachable through LABEL_MAP.
    """
    tenant = tenant or TenantProfile()
    classification = config.classification
    behavior = config.behavior

    values: dict[str, str | None] = {
        "BUSINESS_NAME": tenant.business_name,
        "EMAIL_DOMAIN": tenant.email_domain,
        "BUSINESS_TYPES": ", ".join(config.business_types),
        "CLASSIFIER_PROMPT": classification.prompt,
        "KEYWORDS_JSON": _json(classification.keywords),
        "INTENT_MAP_JSON": _json(classification.intent_map),
        "INTENT_AMBIGUITIES_JSON": _json(classification.intent_ambiguities),
        "ESCALATION_RULES_JSON": _json(
            {k: v.model_dump(mode="json") for k, v in classification.escalation_rules.items()}
        ),
        "SPECIAL_RULES_JSON": _json(
            [rule.model_dump(mode="json") for rule in classification.special_rules]
        ),
        "VENDOR_DOMAINS_JSON": _json(classification.vendor_domains),
        "REPLY_TONE": behavior.voice_tone,
        "FORMALITY_LEVEL": behavior.formality_level,
        "ALLOW_PRICING": "true" if behavior.allow_pricing_in_replies else "false",
        "BEHAVIOR_GOALS": "\n".join(f"- {goal}" for goal in behavior.behavior_goals),
        "UPSELL_TEXT": behavior.upsell_text,
        "AUTO_REPLY_POLICY_JSON": _json(behavior.auto_reply_policy.model_dump(mode="json")),
        "CATEGORY_OVERRIDES_JSON": _json(
            {k: v.model_dump(mode="json") for k, v in behavior.category_overrides.items()}
        ),
        "FOLLOW_UP_PHRASES_JSON": _json(behavior.follow_up_phrasing),
        "SIGNATURE": _signature(config, tenant),
        "VOICE_STYLE": tenant.voice_style,
        "TEAM_MEMBERS_JSON": _json([m.model_dump(mode="json") for m in tenant.team_members]),
        "CONFIGURATION_CHECKSUM": config.checksum(),
    }

    paths = config.taxonomy.paths()
    values["LABEL_MAP"] = _json({path: id_map[path] for path in paths if path in id_map})

    # first path wins when two paths normalize to the same key
    owners: dict[str, str] = {}
    for path in paths:
        key = label_placeholder_key(path)
        if key in owners:
            logger.warning("label_key_collision", path=path, key=key, kept=owners[key])
            continue
        if key in values:
            logger.warning("label_key_reserved", path=path, key=key)
            continue
        owners[key] = path
        values[key] = id_map.get(path)
    return values
