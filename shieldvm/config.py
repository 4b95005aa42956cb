from pydantic import model_validator
from pydantic_settings import BaseSettings

_DEFAULT_PROVING_KEY = "dev-proving-key-change-in-production"


class Settings(BaseSettings):
    # App
    environment: str = "development"
    log_level: str = "INFO"
    log_json: bool = False

    # Programs: comma-separated "program_id/function" pairs that only the
    # ledger itself may invoke
    coinbase_functions: str = "credits.aleo/genesis,credits.aleo/mint"

    # Legacy output tagging: non-witness boolean/field outputs public,
    # every other non-witness output private
    legacy_output_visibility: bool = False

    # Reference backend
    proving_key: str = _DEFAULT_PROVING_KEY

    model_config = {"env_prefix": "SHIELDVM_", "env_file": ".env", "extra": "ignore"}

    @model_validator(mode="after")
    def _validate_production(self):
        if self.environment == "production":
            if self.proving_key == _DEFAULT_PROVING_KEY:
                raise ValueError(
                    "Production requires a non-default SHIELDVM_PROVING_KEY"
                )
        return self

    def coinbase_pairs(self) -> set[tuple[str, str]]:
        pairs = set()
        for item in self.coinbase_functions.split(","):
            item = item.strip()
            if not item:
                continue
            program_id, _, function_name = item.partition("/")
            pairs.add((program_id.strip(), function_name.strip()))
        return pairs


settings = Settings()
