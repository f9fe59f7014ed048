from dataclasses import dataclass, replace


@dataclass(frozen=True)
class LoginForm:
    """Login form field values."""
    email: str = ''
    password: str = ''

    def on_change(self, name: str, value: str) -> "LoginForm":
        """Return a copy with field `name` set to `value`."""
        if name not in ('email', 'password'):
            raise ValueError(f"Unknown login form field: {name}")
        return replace(self, **{name: value})

    def is_complete(self) -> bool:
        return bool(self.email.strip()) and bool(self.password)
