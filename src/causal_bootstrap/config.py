"""Configuration for the causal bootstrapping pipeline."""

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Optional

import yaml


# Bootstrapping loop
NUM_ITERATIONS = 3
MAX_WORKERS = 16

# Selection budgets (growth per round)
PATTERN_BUDGET = 25
INSTANCE_BUDGET = 10
# None: use the number of loaded seeds
INITIAL_SEED_BUDGET = None

# Statistical thresholds
MIN_PATTERN_SUPPORT = 2
MIN_INSTANCE_SUPPORT = 2
MIN_INSTANCE_FREQUENCY = 2

# Pattern shape
MIN_PATTERN_TOKENS = 5
MAX_PATTERN_TOKENS = 21
VALID_NUMBER_OF_BRACKETS = 4

# Penn Treebank noun tags accepted by the cause/effect placeholders
NOUN_TAGS = ("NN", "NNS", "NNP", "NNPS")

CAUSE_PLACEHOLDER = "[[cause]]"
EFFECT_PLACEHOLDER = "[[effect]]"

# Sentences containing one of these words are never used for extraction
NEGATION_WORDS = ("no", "not", "n't", "doesn't", "didn't")

# spaCy configuration
SPACY_MODEL = "en_core_web_lg"


class ConfigError(ValueError):
    """Raised for an invalid bootstrapping configuration."""


@dataclass
class BootstrapConfig:
    """Run configuration for :class:`~causal_bootstrap.bootstrapper.Bootstrapper`.

    Attributes
    ----------
    iterations : int
        Number of bootstrapping rounds; the last round only extracts patterns
    max_workers : int
        Size of the worker pool used by each extraction stage
    pattern_budget : int
        Patterns that may be added on top of last round's selection
    instance_budget : int
        Instances that may be added on top of last round's selection
    initial_seed_budget : Optional[int]
        Selection count assumed for the round before the first one; None
        means the number of seeds
    min_pattern_support : int
        Minimum number of distinct seeds supporting a pattern
    min_instance_support : int
        Minimum number of distinct patterns supporting an instance
    min_instance_frequency : int
        Minimum number of sentences an instance was extracted from
    progress : bool
        Show tqdm progress bars while joining extraction tasks
    """

    iterations: int = NUM_ITERATIONS
    max_workers: int = MAX_WORKERS
    pattern_budget: int = PATTERN_BUDGET
    instance_budget: int = INSTANCE_BUDGET
    initial_seed_budget: Optional[int] = INITIAL_SEED_BUDGET
    min_pattern_support: int = MIN_PATTERN_SUPPORT
    min_instance_support: int = MIN_INSTANCE_SUPPORT
    min_instance_frequency: int = MIN_INSTANCE_FREQUENCY
    progress: bool = True

    def __post_init__(self) -> None:
        if self.iterations < 1:
            raise ConfigError(f"iterations must be >= 1, got {self.iterations}")
        if self.max_workers < 1:
            raise ConfigError(f"max_workers must be >= 1, got {self.max_workers}")
        for name in ("pattern_budget", "instance_budget", "initial_seed_budget"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ConfigError(f"{name} must not be negative")

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "BootstrapConfig":
        """Build a config from a mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**values)

    @classmethod
    def from_yaml(cls, yaml_path: str) -> "BootstrapConfig":
        """Load a config from a YAML file.

        Parameters
        ----------
        yaml_path : str
            Path to YAML config file with a top-level ``bootstrap`` section

        Returns
        -------
        BootstrapConfig
            Parsed configuration; missing keys keep their defaults
        """
        with open(yaml_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}

        if not isinstance(config, dict):
            raise ConfigError(f"Expected a mapping in {yaml_path}")

        return cls.from_dict(config.get("bootstrap", {}) or {})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config(
    yaml_path: Optional[str] = None, **overrides: Any
) -> BootstrapConfig:
    """Load the YAML config (if any) and apply non-None overrides."""
    if yaml_path:
        values = BootstrapConfig.from_yaml(yaml_path).to_dict()
    else:
        values = BootstrapConfig().to_dict()

    values.update({k: v for k, v in overrides.items() if v is not None})
    return BootstrapConfig.from_dict(values)
