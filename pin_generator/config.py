"""Configuration loading and management."""
import os
from pathlib import Path
from typing import Dict, Any
import yaml
from dotenv import load_dotenv


STORE_BACKENDS = ("supabase", "memory")


class Config:
    """Configuration manager: .env file, environment variables, optional YAML overrides."""
    
    def __init__(self, env_path: str = ".env"):
        self.config: Dict[str, Any] = {}
        
        # Load .env from the current working directory if present
        path = Path(env_path)
        if path.exists():
            load_dotenv(path)
            print(f"✅ Loaded .env from {path.absolute()}")
    
    def load(self):
        """Load configuration from environment variables, then the YAML file."""
        self._load_env_config()
        self._load_yaml_config(self.config["config_path"])
        self._validate()
    
    def _load_env_config(self):
        """Load configuration from environment variables."""
        self.config = {
            "supabase_url": os.getenv("SUPABASE_URL", ""),
            "supabase_key": os.getenv("SUPABASE_KEY", ""),
            "table_name": os.getenv("PIN_TABLE", "PIN"),
            "random_rpc": os.getenv("PIN_RANDOM_RPC", "get_random_pins"),
            "reset_rpc": os.getenv("PIN_RESET_RPC", "reset_pin_allocation"),
            "store": os.getenv("PIN_STORE", "supabase"),
            "max_rollovers": int(os.getenv("PIN_MAX_ROLLOVERS", "10")),
            "request_timeout": float(os.getenv("PIN_REQUEST_TIMEOUT", "30")),
            "config_path": os.getenv("PIN_CONFIG_PATH", "config/pin_generator.yaml"),
        }
    
    def _load_yaml_config(self, config_path: str):
        """Overlay keys from a YAML file. Missing file is not an error."""
        path = Path(config_path)
        if not path.exists():
            return
        
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        
        if not isinstance(data, dict):
            raise ValueError(f"Configuration file {path} must contain a mapping")
        
        for key, value in data.items():
            if key not in self.config:
                print(f"⚠️  Ignoring unknown configuration key '{key}' in {path}")
                continue
            self.config[key] = value
    
    def _validate(self):
        if self.config["store"] not in STORE_BACKENDS:
            raise ValueError(
                f"Unknown store '{self.config['store']}', expected one of {', '.join(STORE_BACKENDS)}"
            )
        if int(self.config["max_rollovers"]) < 1:
            raise ValueError("max_rollovers must be at least 1")
        if float(self.config["request_timeout"]) <= 0:
            raise ValueError("request_timeout must be positive")
    
    def set_store(self, store: str):
        """Override the store backend (e.g. from the command line)."""
        self.config["store"] = store
        self._validate()
    
    def get_store_backend(self) -> str:
        return self.config["store"]
    
    def get_supabase_config(self) -> Dict[str, Any]:
        """Get Supabase configuration."""
        return {
            "url": self.config["supabase_url"],
            "key": self.config["supabase_key"],
            "table": self.config["table_name"],
            "random_rpc": self.config["random_rpc"],
            "reset_rpc": self.config["reset_rpc"],
        }
    
    def get_allocation_config(self) -> Dict[str, Any]:
        """Get allocation limits."""
        return {
            "max_rollovers": int(self.config["max_rollovers"]),
            "request_timeout": float(self.config["request_timeout"]),
        }
