"""
Генерация модуля-артефакта компонента.

Модуль определяет одну функцию ``<name>(__blaze, __data, __slots, __bound)``,
которая собирает контекст (общие данные хоста, props, мешок атрибутов, слоты,
@aware) и рендерит скомпилированное тело компонента.
"""

from __future__ import annotations

from typing import Any, Dict, List

from ..host import HostEnvironment
from ..support.attributes import ATTRIBUTES_PROP
from ..support.literals import MISSING, to_python_literal
from ..version import tool_version

_MODULE_TEMPLATE = '''\
# Generated by flare {version} from {source_path}. Do not edit.
from flare.runtime.attributes import AttributeBag, take_prop
from flare.support.literals import MISSING

SOURCE = {source!r}
TEMPLATE = {template!r}
SHARED = {shared}
PROPS = {props}
PROP_DEFAULTS = {prop_defaults}
AWARE = {aware}
AWARE_DEFAULTS = {aware_defaults}


def {name}(__blaze, __data, __slots, __bound):
    variables = {{"__blaze": __blaze, "__env": __blaze.env}}
    data = dict(__data)

    forwarded = data.pop({attributes!r}, None)
    if forwarded is not None and hasattr(forwarded, "items"):
        data = {{**dict(forwarded.items()), **data}}

    data = __blaze.env.compose(SOURCE, data)

    props = {{}}
    for prop in PROPS:
        value = take_prop(data, prop, PROP_DEFAULTS)
        if value is not MISSING:
            props[prop] = value

    aware = {{}}
    for name in AWARE:
        value = take_prop(data, name, {{}})
        if value is MISSING:
            value = __blaze.get_consumable_data(name, AWARE_DEFAULTS.get(name))
        aware[name] = value

    variables[{attributes!r}] = AttributeBag.sanitized(data, __bound)
    for scope in (__slots, props, aware, data, __blaze.env.shared_for(SHARED)):
        for key, value in scope.items():
            variables.setdefault(key, value)

    return __blaze.render_body({name!r}, TEMPLATE, variables)
'''


class Wrapper:
    """Генератор исходного кода модуля компонента."""

    def __init__(self, env: HostEnvironment):
        self.env = env

    def wrap(
        self,
        *,
        name: str,
        source_path: str,
        body: str,
        props: Dict[str, Any],
        aware: Dict[str, Any],
    ) -> str:
        """
        Собирает модуль.

        Args:
            name: Имя функции компонента
            source_path: Путь исходника компонента
            body: Скомпилированное тело (шаблон Jinja без директив)
            props: Объявленные props (имя → умолчание или MISSING)
            aware: Объявленные @aware-имена (имя → умолчание или MISSING)

        Returns:
            Исходный код модуля Python
        """
        declared = set(props) | set(aware) | {ATTRIBUTES_PROP}
        shared = sorted(n for n in self.env.referenced_names(body) if n not in declared and not n.startswith("__"))

        return _MODULE_TEMPLATE.format(
            version=tool_version(),
            source_path=source_path,
            source=source_path,
            template=body,
            shared=_tuple_literal(shared),
            props=_tuple_literal(list(props)),
            prop_defaults=_defaults_literal(props),
            aware=_tuple_literal(list(aware)),
            aware_defaults=_defaults_literal(aware),
            attributes=ATTRIBUTES_PROP,
            name=name,
        )


def _tuple_literal(names: List[str]) -> str:
    return "(" + "".join(f"{n!r}, " for n in names).rstrip(" ") + ")"


def _defaults_literal(declarations: Dict[str, Any]) -> str:
    return to_python_literal({k: v for k, v in declarations.items() if v is not MISSING})


__all__ = ["Wrapper"]
