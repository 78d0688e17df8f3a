from __future__ import annotations

from dataclasses import asdict, dataclass

# Categories a policy template may belong to. Mirrored by the CHECK constraint
# on policy_templates.category.
POLICY_CATEGORIES: tuple[str, ...] = (
    "pets",
    "smoking",
    "guests",
    "cleaning",
    "cancellation",
    "rental_terms",
    "house_rules",
    "maintenance",
    "security",
    "utilities",
    "custom",
)

# Reservation statuses whose tenants are told about policy changes.
NOTIFIABLE_RESERVATION_STATUSES: tuple[str, ...] = ("confirmed", "pending")


def has_override(custom_value: str | None) -> bool:
    """An override is set when it is a non-empty string."""
    return bool(custom_value)


def resolve_value(custom_value: str | None, default_value: str | None) -> str:
    """Effective value of a binding: the override when set, else the template default."""
    if has_override(custom_value):
        return custom_value
    return default_value or ""


def override_changed(stored: str | None, requested: str | None) -> bool:
    """Whether writing `requested` over `stored` changes the override.

    None and "" both mean "no override", so switching between them is not a change.
    """
    return (stored or "") != (requested or "")


@dataclass(frozen=True, slots=True)
class AgreementPolicySnapshot:
    """Frozen copy of one resolved policy, as embedded in a rental agreement.

    Built from plain values only, so nothing in it refers back to the live
    binding or template rows.
    """

    policy_id: int
    title: str
    description: str
    category: str
    value: str
    is_required: bool
    template_version: int

    def as_dict(self) -> dict:
        return asdict(self)


def snapshot_policy(binding) -> AgreementPolicySnapshot:
    """Map a PropertyPolicy (with its template loaded) to a snapshot entry.

    Total over bindings whose template is loaded; a missing template yields an
    entry in the "custom" category carrying only the override.
    """
    template = binding.policy
    if template is None:
        return AgreementPolicySnapshot(
            policy_id=binding.policy_id,
            title="",
            description="",
            category="custom",
            value=resolve_value(binding.custom_value, None),
            is_required=False,
            template_version=0,
        )
    return AgreementPolicySnapshot(
        policy_id=template.id,
        title=template.title,
        description=template.description,
        category=template.category,
        value=resolve_value(binding.custom_value, template.default_value),
        is_required=bool(template.is_required),
        template_version=template.version or 0,
    )
