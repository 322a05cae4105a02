# Standard Library
import os
import tomllib

# PIP3 modules
import yaml

from nenpolib import retry_handler
from nenpolib.models import Department
from nenpolib.models import ReportConfig
from nenpolib.models import validate_fiscal_month


DEFAULT_SETTINGS_PATH = "./nenpou.toml"
DEFAULT_FISCAL_YEAR_START_MONTH = 4
DEFAULT_OUTPUT_FORMAT = "markdown"
DEFAULT_OUTPUT_DIRECTORY = "./reports"
TRANSPORT_CHOICES = ("gh", "http")


#============================================
def get_repo_root() -> str:
	"""
	Return repository root based on this module location.
	"""
	module_dir = os.path.dirname(os.path.abspath(__file__))
	return os.path.dirname(os.path.dirname(module_dir))


#============================================
def resolve_settings_path(path_text: str) -> str:
	"""
	Resolve settings path against cwd first, then repo root.
	"""
	path_text = os.path.expanduser(path_text)
	if os.path.isabs(path_text):
		return path_text
	cwd_candidate = os.path.abspath(path_text)
	if os.path.isfile(cwd_candidate):
		return cwd_candidate
	repo_candidate = os.path.join(get_repo_root(), path_text)
	return os.path.abspath(repo_candidate)


#============================================
def load_settings(path_text: str) -> tuple[dict, str]:
	"""
	Load TOML or YAML settings dict and return it with resolved path.
	"""
	resolved_path = resolve_settings_path(path_text)
	if not os.path.isfile(resolved_path):
		raise RuntimeError(f"Settings file not found: {resolved_path}")
	extension = os.path.splitext(resolved_path)[1].lower()
	try:
		if extension in (".yaml", ".yml"):
			with open(resolved_path, "r", encoding="utf-8") as handle:
				data = yaml.safe_load(handle.read())
		else:
			with open(resolved_path, "rb") as handle:
				data = tomllib.load(handle)
	except (tomllib.TOMLDecodeError, yaml.YAMLError) as error:
		raise RuntimeError(f"Cannot parse settings file {resolved_path}: {error}") from error
	if data is None:
		return {}, resolved_path
	if not isinstance(data, dict):
		raise RuntimeError(f"Settings file must contain a mapping: {resolved_path}")
	return data, resolved_path


#============================================
def get_nested_value(settings: dict, keys: list[str], default_value):
	"""
	Read nested mapping value by key path.
	"""
	current = settings
	for key in keys:
		if not isinstance(current, dict):
			return default_value
		if key not in current:
			return default_value
		current = current[key]
	return current


#============================================
def get_setting_str(settings: dict, keys: list[str], default_value: str) -> str:
	"""
	Read a string setting from nested path with fallback.
	"""
	value = get_nested_value(settings, keys, default_value)
	if value is None:
		return default_value
	return str(value).strip()


#============================================
def get_setting_int(settings: dict, keys: list[str], default_value: int) -> int:
	"""
	Read an integer setting from nested path with fallback.
	"""
	value = get_nested_value(settings, keys, default_value)
	if value is None:
		return default_value
	if isinstance(value, bool):
		raise RuntimeError(f"Invalid integer for setting path {'.'.join(keys)}: {value}")
	try:
		return int(value)
	except (TypeError, ValueError) as error:
		raise RuntimeError(f"Invalid integer for setting path {'.'.join(keys)}: {value}") from error


#============================================
def get_setting_float(settings: dict, keys: list[str], default_value: float) -> float:
	"""
	Read a float setting from nested path with fallback.
	"""
	value = get_nested_value(settings, keys, default_value)
	if value is None:
		return default_value
	if isinstance(value, bool):
		raise RuntimeError(f"Invalid number for setting path {'.'.join(keys)}: {value}")
	try:
		return float(value)
	except (TypeError, ValueError) as error:
		raise RuntimeError(f"Invalid number for setting path {'.'.join(keys)}: {value}") from error


#============================================
def get_setting_bool(settings: dict, keys: list[str], default_value: bool) -> bool:
	"""
	Read a boolean setting from nested path with fallback.
	"""
	value = get_nested_value(settings, keys, default_value)
	if isinstance(value, bool):
		return value
	if isinstance(value, str):
		text = value.strip().lower()
		if text in {"1", "true", "yes", "on"}:
			return True
		if text in {"0", "false", "no", "off"}:
			return False
		raise RuntimeError(f"Invalid boolean for setting path {'.'.join(keys)}: {value}")
	if isinstance(value, int):
		return value != 0
	if value is None:
		return default_value
	raise RuntimeError(f"Invalid boolean for setting path {'.'.join(keys)}: {value}")


#============================================
def get_string_list(mapping: dict, key: str, label: str) -> tuple[str, ...]:
	value = mapping.get(key, [])
	if value is None:
		return ()
	if not isinstance(value, list):
		raise RuntimeError(f"Invalid settings: {label}.{key} must be a list of strings.")
	items = []
	for item in value:
		if not isinstance(item, str) or not item.strip():
			raise RuntimeError(f"Invalid settings: {label}.{key} must be a list of strings.")
		items.append(item.strip())
	return tuple(items)


#============================================
def get_fiscal_month(settings: dict, keys: list[str], default_value: int) -> int:
	month = get_setting_int(settings, keys, default_value)
	try:
		return validate_fiscal_month(month)
	except ValueError as error:
		raise RuntimeError(f"Invalid settings: {'.'.join(keys)} {error}") from error


#============================================
def build_report_config(settings: dict) -> ReportConfig:
	"""
	Build a ReportConfig from loaded settings, checking basic bounds.
	"""
	default_month = get_fiscal_month(
		settings,
		["default_fiscal_year_start_month"],
		DEFAULT_FISCAL_YEAR_START_MONTH,
	)
	department_entries = get_nested_value(settings, ["departments"], [])
	if department_entries is None:
		department_entries = []
	if not isinstance(department_entries, list):
		raise RuntimeError("Invalid settings: departments must be a list of tables.")

	departments = []
	for index, entry in enumerate(department_entries):
		label = f"departments[{index}]"
		if not isinstance(entry, dict):
			raise RuntimeError(f"Invalid settings: {label} must be a table.")
		name = str(entry.get("name") or "").strip()
		if not name:
			raise RuntimeError(f"Invalid settings: {label}.name is required.")
		month = get_fiscal_month(entry, ["fiscal_year_start_month"], default_month)
		departments.append(
			Department(
				name=name,
				fiscal_year_start_month=month,
				github_organizations=get_string_list(entry, "github_organizations", label),
				local_documents=get_string_list(entry, "local_documents", label),
			)
		)

	target_user = get_setting_str(settings, ["target_github_user"], "")
	return ReportConfig(
		target_github_user=target_user or None,
		default_fiscal_year_start_month=default_month,
		default_output_format=get_setting_str(
			settings,
			["default_output_format"],
			DEFAULT_OUTPUT_FORMAT,
		),
		output_directory=get_setting_str(
			settings,
			["output_directory"],
			DEFAULT_OUTPUT_DIRECTORY,
		),
		departments=tuple(departments),
	)


#============================================
def get_github_token(settings: dict) -> str:
	"""
	Resolve GitHub token from settings, then GITHUB_TOKEN, then GH_TOKEN.
	"""
	token = get_setting_str(settings, ["github", "token"], "")
	if token:
		return token
	for env_name in ("GITHUB_TOKEN", "GH_TOKEN"):
		value = os.environ.get(env_name, "").strip()
		if value:
			return value
	return ""


#============================================
def get_transport_name(settings: dict) -> str:
	transport = get_setting_str(settings, ["github", "transport"], "gh").lower()
	if transport not in TRANSPORT_CHOICES:
		raise RuntimeError(
			f"Invalid settings: github.transport must be one of {', '.join(TRANSPORT_CHOICES)}; "
			+ f"got {transport}"
		)
	return transport


#============================================
def get_retry_policy(settings: dict) -> retry_handler.RetryPolicy:
	"""
	Read the [retry] table into a RetryPolicy.
	"""
	defaults = retry_handler.RetryPolicy()
	try:
		return retry_handler.RetryPolicy(
			max_retries=get_setting_int(settings, ["retry", "max_retries"], defaults.max_retries),
			initial_delay_seconds=get_setting_float(
				settings,
				["retry", "initial_delay_seconds"],
				defaults.initial_delay_seconds,
			),
			backoff_multiplier=get_setting_float(
				settings,
				["retry", "backoff_multiplier"],
				defaults.backoff_multiplier,
			),
		)
	except ValueError as error:
		raise RuntimeError(f"Invalid settings: retry {error}") from error


#============================================
def get_cache_dir(settings: dict, default_value: str) -> str:
	value = get_setting_str(settings, ["cache", "directory"], "")
	if value:
		return os.path.expanduser(value)
	return default_value


#============================================
def get_cache_enabled(settings: dict) -> bool:
	return get_setting_bool(settings, ["cache", "enabled"], True)
