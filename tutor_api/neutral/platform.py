from enum import Enum


class PlatformKind(str, Enum):
	FRAMEWORK_NATIVE = "framework_native"
	SERVERLESS_FUNCTION = "serverless_function"

	@property
	def label(self) -> str:
		if self is PlatformKind.SERVERLESS_FUNCTION:
			return "Serverless"
		return "Self-hosted"
