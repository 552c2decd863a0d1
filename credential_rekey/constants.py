"""Library-wide constants.

These constants centralize tunable values used across modules to keep
behavior consistent and avoid duplication.
"""



class Constants:

    # Configuration directives
    _CONFIG_SECTION: str = "Authentication"
    _ENABLED_DIRECTIVE: str = "encrypt_ils_password"
    _ALGORITHM_DIRECTIVE: str = "ils_encryption_algo"
    _KEY_DIRECTIVE: str = "ils_encryption_key"
    _DEFAULT_CONFIG_FILE: str = "config.ini"

    # Algorithm policy
    _NONE_ALGORITHM: str = "none"
    _DEFAULT_OLD_ALGORITHM: str = "blowfish"  # Assumed when encryption is on but no algorithm is set

    # Key derivation
    _PBKDF2_ITERATIONS: int = 5000
    _HMAC_KEY_SIZE: int = 32
    _HMAC_HEX_LENGTH: int = 64

    # Record store
    _USERS_FILE: str = "users.json"
    _USER_CARDS_FILE: str = "user_cards.json"
    _STORE_VERSION: str = "1.0"
    _DEFAULT_DATA_DIR: str = "data"

    @classmethod
    def CONFIG_SECTION(cls) -> str:
        return cls._CONFIG_SECTION

    @classmethod
    def ENABLED_DIRECTIVE(cls) -> str:
        return cls._ENABLED_DIRECTIVE

    @classmethod
    def ALGORITHM_DIRECTIVE(cls) -> str:
        return cls._ALGORITHM_DIRECTIVE

    @classmethod
    def KEY_DIRECTIVE(cls) -> str:
        return cls._KEY_DIRECTIVE

    @classmethod
    def DEFAULT_CONFIG_FILE(cls) -> str:
        return cls._DEFAULT_CONFIG_FILE

    @classmethod
    def NONE_ALGORITHM(cls) -> str:
        return cls._NONE_ALGORITHM

    @classmethod
    def DEFAULT_OLD_ALGORITHM(cls) -> str:
        return cls._DEFAULT_OLD_ALGORITHM

    # Key derivation
    @classmethod
    def PBKDF2_ITERATIONS(cls) -> int:
        return cls._PBKDF2_ITERATIONS

    @classmethod
    def HMAC_KEY_SIZE(cls) -> int:
        return cls._HMAC_KEY_SIZE

    @classmethod
    def HMAC_HEX_LENGTH(cls) -> int:
        return cls._HMAC_HEX_LENGTH

    # Record store
    @classmethod
    def USERS_FILE(cls) -> str:
        return cls._USERS_FILE

    @classmethod
    def USER_CARDS_FILE(cls) -> str:
        return cls._USER_CARDS_FILE

    @classmethod
    def STORE_VERSION(cls) -> str:
        return cls._STORE_VERSION

    @classmethod
    def DEFAULT_DATA_DIR(cls) -> str:
        return cls._DEFAULT_DATA_DIR
