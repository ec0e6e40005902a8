import enum


class Category(str, enum.Enum):
    revenue = "revenue"
    expense = "expense"


class Classification(str, enum.Enum):
    recurring_revenue = "recurring_revenue"
    variable_revenue = "variable_revenue"
    fixed_cost = "fixed_cost"
    variable_cost = "variable_cost"


class ConfidenceLevel(str, enum.Enum):
    high = "high"
    medium = "medium"
    low = "low"


class Trend(str, enum.Enum):
    growing = "growing"
    declining = "declining"
    stable = "stable"


class DataQualityLabel(str, enum.Enum):
    excellent = "excellent"
    good = "good"
    fair = "fair"
    poor = "poor"


class Scenario(str, enum.Enum):
    baseline = "baseline"
    growth = "growth"
    downturn = "downturn"


class SelectionProfile(str, enum.Enum):
    production = "production"
    demo = "demo"
