'''Field validation with Laravel-style rule declarations.

Rules are declared per field either as a list (``['required', 'max:255']``)
or as a pipe separated string (``'required|max:255'``). Each field reports
only the first rule it breaks.
'''
from typing import Any, Callable, Mapping, Optional, Union

RuleSpec = Union[str, list[str]]
Check = Callable[[Any, Optional[str]], bool]


def _present(value:Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ''
    return True


def _required(value:Any, _arg:Optional[str]) -> bool:
    return _present(value)


def _string(value:Any, _arg:Optional[str]) -> bool:
    return value is None or isinstance(value, str)


def _max(value:Any, arg:Optional[str]) -> bool:
    if not _present(value):
        return True
    return len(str(value)) <= int(arg)


def _min(value:Any, arg:Optional[str]) -> bool:
    if not _present(value):
        return True
    return len(str(value)) >= int(arg)


CHECKS : dict[str, Check] = {
    'required': _required,
    'string': _string,
    'max': _max,
    'min': _min,
}

MESSAGES : dict[str, str] = {
    'required': 'The {field} field is required.',
    'string': 'The {field} must be a string.',
    'max': 'The {field} may not be greater than {arg} characters.',
    'min': 'The {field} must be at least {arg} characters.',
}

POST_RULES : dict[str, RuleSpec] = {
    'title': 'required|string|max:255',
    'body': 'required|string',
}


def parse_rules(spec:RuleSpec) -> list[tuple[str, Optional[str]]]:
    '''Split a rule declaration into ``(name, argument)`` pairs.'''
    parts : list[str] = spec.split('|') if isinstance(spec, str) else list(spec)
    parsed : list[tuple[str, Optional[str]]] = []
    for part in parts:
        part = part.strip()
        if not part:
            continue
        name, _, arg = part.partition(':')
        if name not in CHECKS:
            raise ValueError(f'unknown validation rule: {name}')
        if name in ('max', 'min') and not arg.isdigit():
            raise ValueError(f'rule {name} needs a numeric argument, got {arg!r}')
        parsed.append((name, arg or None))
    return parsed


def validate(data:Mapping[str, Any], rules:Mapping[str, RuleSpec]) -> dict[str, str]:
    '''Return a mapping of field to violated rule, empty when everything passes.'''
    errors : dict[str, str] = {}
    for field, spec in rules.items():
        value : Any = data.get(field)
        for name, arg in parse_rules(spec):
            if not CHECKS[name](value, arg):
                errors[field] = name
                break
    return errors


def messages(errors:Mapping[str, str], rules:Mapping[str, RuleSpec]) -> dict[str, str]:
    '''Render the output of ``validate`` as human readable messages.'''
    rendered : dict[str, str] = {}
    for field, rule in errors.items():
        arg : Optional[str] = dict(parse_rules(rules.get(field, ''))).get(rule)
        label : str = field.replace('_', ' ')
        rendered[field] = MESSAGES[rule].format(field=label, arg=arg)
    return rendered
