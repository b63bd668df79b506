"""
Input Validation

DESIGN DECISION: Validation is presence checking only. A draft is rejected
when a required field is missing, and nothing is created from a rejected
draft. We do not second-guess dates, descriptions or how large an amount is.

Required fields:
- Transaction: category, amount, a known type (Income/Expense)
- Saved item: name, amount, category
- Category: a non-empty name not already in the list
- Budget: a limit that is not negative
- Month: a valid YYYY-MM key

Amounts that are absent or garbage have already been coerced to zero by
the draft models, so "amount is required" covers both cases.

A category that is not in the user's list only produces a warning.
Transactions reference categories by name and that link is not enforced.
"""

from decimal import Decimal
from typing import Iterable, Optional

from paisapal.models.ledger import (
    SavedItemDraft,
    TransactionDraft,
    TransactionType,
    ValidationIssue,
    ValidationResult,
    parse_month_key,
)


class InputRejectedError(Exception):
    """User input failed validation; carries the result and a user-facing message."""

    def __init__(self, result: ValidationResult, message: str):
        self.result = result
        super().__init__(message)


class InputValidator:
    """Checks drafts and category names before anything is stored."""

    def validate_transaction(
        self,
        draft: TransactionDraft,
        known_categories: Optional[Iterable[str]] = None,
    ) -> ValidationResult:
        issues = []

        valid_types = {t.value for t in TransactionType}
        if draft.type not in valid_types:
            issues.append(ValidationIssue(
                field="type",
                issue_type="invalid_value",
                message=f"Type must be one of: {', '.join(sorted(valid_types))}",
            ))

        issues.extend(self._check_category(draft.category, known_categories))
        issues.extend(self._check_amount(draft.amount))

        return ValidationResult(subject="transaction", issues=issues)

    def validate_saved_item(
        self,
        draft: SavedItemDraft,
        known_categories: Optional[Iterable[str]] = None,
    ) -> ValidationResult:
        issues = []

        if not draft.name:
            issues.append(ValidationIssue(
                field="name",
                issue_type="missing",
                message="Name is required",
            ))

        issues.extend(self._check_amount(draft.amount))
        issues.extend(self._check_category(draft.category, known_categories))

        return ValidationResult(subject="saved_item", issues=issues)

    def validate_category_name(
        self,
        name: Optional[str],
        existing: Iterable[str],
    ) -> ValidationResult:
        issues = []
        cleaned = (name or "").strip()

        if not cleaned:
            issues.append(ValidationIssue(
                field="name",
                issue_type="missing",
                message="Category name is required",
            ))
        elif cleaned in set(existing):
            issues.append(ValidationIssue(
                field="name",
                issue_type="duplicate",
                message="Category already exists.",
            ))

        return ValidationResult(subject="category", issues=issues)

    def validate_budget_limit(self, limit: Decimal) -> ValidationResult:
        """Budgets may be zero (no budget) but not negative."""
        issues = []
        if limit < 0:
            issues.append(ValidationIssue(
                field="limit",
                issue_type="invalid_value",
                message="Budget cannot be negative",
            ))
        return ValidationResult(subject="budget", issues=issues)

    def validate_month_key(self, key: Optional[str]) -> ValidationResult:
        issues = []
        try:
            parse_month_key(key)
        except ValueError as e:
            issues.append(ValidationIssue(
                field="month",
                issue_type="invalid_format",
                message=str(e),
            ))
        return ValidationResult(subject="month", issues=issues)

    def _check_amount(self, amount: Decimal) -> list[ValidationIssue]:
        if amount == 0:
            return [ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
            )]
        if amount < 0:
            return [ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount cannot be negative; choose Income or Expense instead",
            )]
        return []

    def _check_category(
        self,
        category: Optional[str],
        known_categories: Optional[Iterable[str]],
    ) -> list[ValidationIssue]:
        if not category:
            return [ValidationIssue(
                field="category",
                issue_type="missing",
                message="Category is required",
            )]
        if known_categories is not None and category not in set(known_categories):
            return [ValidationIssue(
                field="category",
                issue_type="unknown",
                message=f"'{category}' is not one of your categories",
                severity="warning",
            )]
        return []

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """
        Generate the notice shown to the user.
        """
        if result.is_valid and not result.warnings:
            return "✅ Saved."

        lines = []

        if result.has_errors:
            lines.append("❌ Please fill in the missing details:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Note:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)

    def raise_for_errors(self, result: ValidationResult) -> None:
        """Raise InputRejectedError when the result has error-level issues."""
        if result.has_errors:
            raise InputRejectedError(result, self.get_user_friendly_summary(result))
