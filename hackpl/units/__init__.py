"""
This package contains all hackpl units. A unit is a class inheriting from `hackpl.units.Unit` that
implements `hackpl.units.Unit.process`. If the operation implemented by a unit can be reversed,
the unit also implements a method called `reverse` with the same signature. For example, the
following would be a minimalistic unit that reverses its input:

    from hackpl.units import Unit

    class flip(Unit):
        def process(self, data): return data[::-1]
        def reverse(self, data): return data[::-1]

The above script can be run from the command line. Since `flip` is not marked as abstract, its
inherited `hackpl.units.Unit.run` method will be invoked when the script is executed.

### Command Line Parameters

Units accept command line parameters through their initialization routine. The parameters can be
annotated with `hackpl.units.Arg` to control the command line interface:

    from hackpl.units import Arg, Unit
    from hackpl.lib.types import Param

    class head(Unit):
        def __init__(self, count: Param[int, Arg.Number('-n', help='Keep {varname} bytes.')] = 16):
            pass

        def process(self, data: bytearray):
            return data[:self.args.count]

The `__init__` code can be left empty: In this case, boilerplate code is added automatically that
copies all `__init__` parameters to the `args` member variable of the unit.

### Units in Code

Units can be used in Python code in nearly the same way as on the command line:

- The binary or operator `|` can be used to combine units into pipelines.
- Combining a pipeline from the left with a byte string or io stream object will feed this byte
  string into the unit.
- Unary negation of a reversible unit is equivalent to using the `-R` switch for reverse mode.
- A pipeline is an iterable of output chunks. It can be connected from the right to a callable,
  like `bytes` or `str`, which receives the concatenated output; to a list containing a single
  callable, which is applied to each chunk; to a writable binary stream; or to a literal ellipsis
  (`...`) to obtain the raw output.

For example:

    >>> from hackpl import hpunpack, hpxtract
    >>> with open('HACKPL.EXE', 'rb') as stream:
    ...     articles = stream.read() | hpxtract(2) | [bytes]

When used in code, units raise exceptions to the caller. When executed from the command line, the
exception is logged and the process exits with a non-zero status code.
"""
from __future__ import annotations

import abc
import copy
import inspect
import os
import sys

from abc import ABCMeta
from argparse import OPTIONAL, ZERO_OR_MORE, ArgumentTypeError, Namespace
from collections import OrderedDict
from functools import wraps
from typing import (
    TYPE_CHECKING,
    Any,
    BinaryIO,
    Callable,
    Iterable,
    Iterator,
    Mapping,
    Type,
    TypeVar,
    cast,
    no_type_check,
)

from hackpl.lib.argformats import number
from hackpl.lib.argparser import ArgparseError, ArgumentParserWithKeywordHooks
from hackpl.lib.environment import Logger, LogLevel, environment, logger
from hackpl.lib.exceptions import HackplException
from hackpl.lib.structures import MemoryFile
from hackpl.lib.tools import (
    autoinvoke,
    documentation,
    exception_to_string,
    isbuffer,
    isstream,
    normalize_to_display,
    normalize_to_identifier,
    one,
    skipfirst,
)
from hackpl.lib.types import buf

if TYPE_CHECKING:
    from typing import Self

    ProcType = Callable[['Unit', bytearray], Any]

    _F = TypeVar('_F', bound=Callable)


class Entry:
    """
    An empty class marker. Any entry point unit (i.e. any unit that can be executed via the command
    line) is an instance of this class.
    """


class Argument:
    """
    This class implements an abstract argument to a Python function, including positional and
    keyword arguments. Passing an `Argument` to a Python function can be done via the matrix
    multiplication operator: The syntax `function @ Argument(a, b, kwd=c)` is equivalent to the
    call `function(a, b, kwd=c)`.
    """
    __slots__ = 'args', 'kwargs'

    args: list[Any]
    kwargs: dict[str, Any]

    def __init__(self, *args, **kwargs):
        self.args = list(args)
        self.kwargs = kwargs

    def __rmatmul__(self, method):
        return method(*self.args, **self.kwargs)

    def __repr__(self):
        def rep(v):
            r = repr(v)
            if r.startswith('<'):
                try:
                    return v.__name__
                except AttributeError:
                    pass
                try:
                    return v.__class__.__name__
                except AttributeError:
                    pass
            return r
        arglist = [repr(a) for a in self.args]
        arglist.extend(F'{key!s}={rep(value)}' for key, value in self.kwargs.items())
        return ', '.join(arglist)


class Arg(Argument):
    """
    This class is specifically an argument for the `add_argument` method of an `ArgumentParser` from
    the `argparse` module. It is used as an annotation for the constructor of a unit to control the
    argument parser of that unit's command line interface.
    """

    class omit:
        """
        A sentinel class to mark arguments as omitted for the argument parser.
        """

    args: list[str]

    __slots__ = 'args', 'guessed'

    def __init__(
        self, *args: str,
        action   : type[omit] | str                       = omit,  # noqa
        choices  : type[omit] | Iterable[Any]             = omit,  # noqa
        const    : type[omit] | Any                       = omit,  # noqa
        default  : type[omit] | Any                       = omit,  # noqa
        dest     : type[omit] | str                       = omit,  # noqa
        help     : type[omit] | str                       = omit,  # noqa
        metavar  : type[omit] | str                       = omit,  # noqa
        nargs    : type[omit] | int | str                 = omit,  # noqa
        required : type[omit] | bool                      = omit,  # noqa
        type     : type[omit] | type | Callable           = omit,  # noqa
        guessed  : set[str] | None                        = None,  # noqa
    ) -> None:
        kwargs = dict(action=action, choices=choices, const=const, default=default, dest=dest,
            help=help, metavar=metavar, nargs=nargs, required=required, type=type)
        kwargs = {key: value for key, value in kwargs.items() if value is not self.omit}
        self.guessed = set(guessed or ())
        super().__init__(*args, **kwargs)

    def update_help(self):
        """
        Fill in the default value of the argument via the formatting symbol `{default}` in its help
        text. The default may only be known after the `__init__` signature of the unit was read.
        """
        class formatting(dict):
            arg = self

            def __missing__(self, key):
                if key == 'default':
                    default = self.arg.kwargs.get('default')
                    if isbuffer(default):
                        return bytes(default).decode('latin1')
                    return default
                if key == 'varname':
                    return self.arg.kwargs.get('metavar', self.arg.destination)
                raise KeyError(key)
        try:
            help_string: str = self.kwargs['help']
        except KeyError:
            return
        self.kwargs['help'] = help_string.format_map(formatting())

    @classmethod
    def Switch(
        cls,
        *args   : str, off=False,
        help    : type[omit] | str = omit,
        dest    : type[omit] | str = omit,
    ):
        """
        A convenience method to add argparse arguments that change a boolean value from True to False or
        vice versa. By default, a switch will have a False default and change it to True when specified.
        """
        return cls(*args, help=help, dest=dest, action='store_false' if off else 'store_true')

    @classmethod
    def Number(
        cls,
        *args   : str,
        help    : type[omit] | str = omit,
        dest    : type[omit] | str = omit,
        metavar : type[omit] | str = omit,
    ):
        """
        Used to add argparse arguments that contain a number.
        """
        if metavar is cls.omit:
            metavar = 'N'
        return cls(*args, help=help, dest=dest, type=number, metavar=metavar)

    @property
    def positional(self) -> bool:
        """
        Indicates whether the argument is positional. This is crudely determined by whether it has
        a specifier that does not start with a dash.
        """
        return any(a[0] != '-' for a in self.args)

    @property
    def destination(self) -> str:
        """
        The name of the variable where the contents of this parsed argument will be stored.
        """
        for a in self.args:
            if a[0] != '-':
                return a
        try:
            return self.kwargs['dest']
        except KeyError:
            for a in self.args:
                if a.startswith('--'):
                    dest = normalize_to_identifier(a)
                    if dest.isidentifier():
                        return dest
            raise AttributeError(F'The argument with these values has no destination: {self!r}')

    @classmethod
    def Infer(cls, pt: inspect.Parameter, module: str | None = None):
        """
        This class method can be used to infer the argparse argument for a Python function
        parameter. This guess is based on the annotation, name, and default value.
        """

        def needs_type(item: dict[str, str]):
            return item.get('action', 'store') == 'store'

        def get_argp_type(at):
            if at is type(None):
                return None
            if issubclass(at, (bytes, bytearray, memoryview)):
                return str.encode
            if issubclass(at, int):
                return number
            return at

        name = normalize_to_display(pt.name, False)
        default = pt.default
        empty = pt.empty
        guessed_pos_args = []
        guessed_kwd_args: dict[str, Any] = dict(dest=pt.name)
        guessed = set()
        annotation = pt.annotation

        def guess(key, value):
            try:
                return guessed_kwd_args[key]
            except KeyError:
                guessed_kwd_args[key] = value
                guessed.add(key)
                return value

        if isinstance(annotation, str):
            symbols = None
            if module is not None:
                __import__(module)
                symbols = sys.modules[module].__dict__
            try:
                annotation = eval(annotation, symbols)
            except Exception:
                pass

        if annotation is not empty:
            if isinstance(annotation, Arg):
                if annotation.kwargs.get('dest', pt.name) != pt.name:
                    raise ValueError(
                        F'Incompatible argument destination specified; parameter {pt.name} '
                        F'was annotated with {annotation!r}.')
                guessed_pos_args = annotation.args
                guessed_kwd_args.update(annotation.kwargs)
            elif isinstance(annotation, type):
                guessed.add('type')
                if not issubclass(annotation, bool) and needs_type(guessed_kwd_args):
                    guessed_kwd_args.update(type=get_argp_type(annotation))
                elif not isinstance(default, bool):
                    raise ValueError('Default value for boolean arguments must be provided.')

        if not guessed_pos_args:
            guessed_pos_args = [F'--{name}' if pt.kind is pt.KEYWORD_ONLY else name]

        if pt.kind is pt.VAR_POSITIONAL:
            guess('nargs', ZERO_OR_MORE)
            return cls(*guessed_pos_args, **guessed_kwd_args)

        if default is not empty:
            guess('default', default)
            if pt.kind is pt.POSITIONAL_ONLY:
                guess('nargs', OPTIONAL)
            if isinstance(default, bool):
                guessed_kwd_args['action'] = F'store_{not default!s}'.lower()
            elif needs_type(guessed_kwd_args) and default is not None:
                guess('type', get_argp_type(type(default)))

        return cls(*guessed_pos_args, **guessed_kwd_args, guessed=guessed)

    def __copy__(self):
        cls = self.__class__
        clone = cls.__new__(cls)
        clone.kwargs = dict(self.kwargs)
        clone.args = list(self.args)
        clone.guessed = set(self.guessed)
        return clone

    def __repr__(self) -> str:
        return F'{self.__class__.__name__}({super().__repr__()})'


if TYPE_CHECKING:
    _ArgumentSpecificationBase = OrderedDict[str, Arg]
else:
    _ArgumentSpecificationBase = OrderedDict


class ArgumentSpecification(_ArgumentSpecificationBase):
    """
    A container object that stores `hackpl.units.Arg` specifications.
    """

    def merge(self: dict[str, Arg], argument: Arg):
        """
        Insert or replace the specification of the given argument.
        """
        self[argument.destination] = argument


def _UnitProcessorBoilerplate(operation: ProcType) -> ProcType:
    @wraps(operation)
    def wrapped(self: Unit, data: buf | None):
        if data is None:
            data = bytearray()
        elif not isinstance(data, bytearray):
            data = bytearray(data)
        return operation(self, data)
    return wrapped


class MissingFunction:
    """
    A singleton class that represents a missing function. Used internally to indicate that a unit
    does not implement a reverse operation.
    """
    def __init__(self, *_):
        pass

    def __call__(*_, **__):
        raise NotImplementedError('A non-invertible unit was operated in reverse.')

    @classmethod
    def Wrap(cls, _: _F) -> _F:
        return cast('_F', cls())


class Executable(ABCMeta):
    """
    This is the metaclass for units. A class which is of this type is required to implement a
    method `run()`. If the class is created in the currently executing module, then an instance of
    the class is automatically created after it is defined and its `run()` method is invoked.
    """

    Entry = None
    """
    This variable stores the executable entry point. If more than one entry point are present,
    only the first one is executed.
    """

    _argument_specification: dict[str, Arg]

    def _infer_argspec(cls, parameters: Mapping[str, inspect.Parameter], args: ArgumentSpecification, module: str):
        exposed = [pt.name for pt in skipfirst(parameters.values()) if pt.kind != pt.VAR_KEYWORD]
        # The arguments are added in reverse order to the argument parser later.
        exposed.reverse()

        for name in exposed:
            args.merge(Arg.Infer(parameters[name], module))

        for known in args.values():
            kwargs = known.kwargs
            if known.positional:
                kwargs.pop('dest', None)
                if 'default' in kwargs and kwargs.get('action', 'store') == 'store':
                    kwargs.setdefault('nargs', OPTIONAL)
            elif not any(len(a) > 2 for a in known.args):
                flagname = normalize_to_display(known.destination, False)
                known.args.append(F'--{flagname}')
            known.update_help()
            action: str = kwargs.get('action', 'store')
            if action.startswith('store_'):
                kwargs.pop('default', None)
                continue
            if action == 'store':
                kwargs.setdefault('type', str)
        return args

    def __new__(mcs, name: str, bases: tuple[type, ...], nmspc: dict[str, Any], abstract=False):
        def decorate(**decorations):
            for method, decorator in decorations.items():
                try:
                    old = nmspc[method]
                except KeyError:
                    continue
                if isinstance(old, MissingFunction):
                    continue
                if getattr(old, '__isabstractmethod__', False):
                    continue
                nmspc[method] = decorator(old)
        decorate(
            process=_UnitProcessorBoilerplate,
            reverse=_UnitProcessorBoilerplate,
            __init__=no_type_check,
        )
        if not abstract and Entry not in bases:
            for b in bases:
                try:
                    if b.is_reversible:
                        break
                except AttributeError:
                    pass
            else:
                nmspc.setdefault('reverse', MissingFunction())
            bases = bases + (Entry,)
        nmspc.setdefault('__doc__', '')
        return super().__new__(mcs, name, bases, nmspc)

    def __init__(cls, name: str, bases: tuple[type, ...], nmspc: dict[str, Any], abstract=False):
        super().__init__(name, bases, nmspc)
        cls._argument_specification = args = ArgumentSpecification()

        parameters = inspect.signature(cls.__init__).parameters

        for base in bases:
            try:
                base: Executable
                spec = base._argument_specification
            except AttributeError:
                continue
            for key, value in spec.items():
                if key in parameters:
                    args[key] = value.__copy__()

        cls._infer_argspec(parameters, args, cls.__module__)

        try:
            initcode = cls.__init__.__code__.co_code
        except AttributeError:
            initcode = None

        if initcode == (lambda: None).__code__.co_code:
            base = bases[0]
            head = []
            defs = {}
            tail = None

            for p in skipfirst(parameters.values()):
                if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD):
                    head.append(p.name)
                if p.kind in (p.KEYWORD_ONLY, p.POSITIONAL_OR_KEYWORD) and p.default is not p.empty:
                    defs[p.name] = p.default
                if p.kind is p.VAR_POSITIONAL:
                    tail = p.name

            @wraps(cls.__init__)
            def auto__init__(self, *args, **kw):
                for name, arg in zip(head, args):
                    kw[name] = arg
                if tail:
                    k = min(len(args), len(head))
                    kw[tail] = args[k:]
                for key in defs:
                    if key not in kw:
                        kw[key] = defs[key]
                base.__init__(self, **kw)

            setattr(cls, '__init__', auto__init__)

        if not abstract and sys.modules[cls.__module__].__name__ == '__main__':
            if not Executable.Entry:
                Executable.Entry = cls.name
                cast(Type[Unit], cls).run()

    def __or__(cls, other):
        return cls().__or__(other)

    def __pos__(cls):
        return cls()

    def __neg__(cls):
        unit: Unit = cls()
        unit.args.reverse = True
        return unit

    def __ror__(cls, other) -> Unit:
        return cls().__ror__(other)

    @property
    def is_reversible(cls) -> bool:
        """
        This property is `True` if and only if the unit has a member function named `reverse`. By
        convention, this member function implements the inverse of `hackpl.units.Unit.process`.
        """
        r = cast(Type[Unit], cls).reverse
        if isinstance(r, MissingFunction):
            return False
        return not getattr(r, '__isabstractmethod__', False)

    @property
    def codec(cls) -> str:
        """
        The default codec for encoding textual information between units. The value of this
        property is hardcoded to `UTF8`.
        """
        return 'UTF8'

    @property
    def name(cls) -> str:
        """
        The name of the unit as it would be used on the command line. This is the application of
        the function `hackpl.lib.tools.normalize_to_display` to the class name.
        """
        return normalize_to_display(cls.__name__)

    @property
    def logger(cls) -> Logger:
        """
        The debug logger instance for the unit.
        """
        try:
            return cls._logger
        except AttributeError:
            pass
        cls._logger = _logger = logger(cls.name)
        return _logger


class Unit(metaclass=Executable, abstract=True):
    """
    The base class for all hackpl units. It implements a small set of globally available options
    and the handling of inputs and outputs.
    """
    _source: BinaryIO | Unit | list[buf] | None
    _target: BinaryIO | None
    _chunks: Iterator[buf] | None
    _failed: bool
    console: bool

    @abc.abstractmethod
    def process(self, data: bytearray, /) -> None | buf | Iterable[buf]:
        """
        This routine is overridden by children of `hackpl.units.Unit` to define how the unit
        processes a given chunk of binary data.
        """

    @MissingFunction.Wrap
    def reverse(self, data: bytearray, /) -> None | buf | Iterable[buf]:
        """
        If this routine is overridden by children of `hackpl.units.Unit`, then it must implement an
        operation that reverses the `hackpl.units.Unit.process` operation.
        """

    @property
    def is_reversible(self) -> bool:
        """
        Proxy to `hackpl.units.Executable.is_reversible`.
        """
        return self.__class__.is_reversible

    @property
    def codec(self) -> str:
        """
        Proxy to `hackpl.units.Executable.codec`.
        """
        return self.__class__.codec

    @property
    def logger(self) -> Logger:
        """
        Proxy to `hackpl.units.Executable.logger`.
        """
        return self.__class__.logger

    @property
    def name(self) -> str:
        """
        Proxy to `hackpl.units.Executable.name`.
        """
        return self.__class__.name

    @property
    def is_quiet(self) -> bool:
        """
        Returns whether the global `--quiet` flag is set, indicating that the unit should not
        generate any log output.
        """
        return getattr(self.args, 'quiet', False)

    @property
    def failed(self) -> bool:
        """
        Indicates whether an exception was logged while this unit was attached to a console.
        """
        return self._failed

    @property
    def log_level(self) -> LogLevel:
        """
        Returns the current log level as an element of `hackpl.lib.environment.LogLevel`.
        """
        if self.is_quiet:
            return LogLevel.NONE
        return LogLevel(self.logger.getEffectiveLevel())

    @log_level.setter
    def log_level(self, value: int | LogLevel) -> None:
        if not isinstance(value, LogLevel):
            value = LogLevel.FromVerbosity(value)
        self.logger.setLevel(value)
        logger('hackpl.lib').setLevel(value)

    def log_detach(self) -> Self:
        """
        When a unit is created using the `hackpl.units.Unit.assemble` method, it is attached to a
        logger by default. This method detaches the unit from its logger, which also means that any
        exceptions that occur during runtime will be raised to the caller.
        """
        self.log_level = LogLevel.DETACHED
        return self

    def _exception_handler(self, exception: BaseException):
        if self.log_level >= LogLevel.DETACHED:
            raise exception
        if isinstance(exception, (GeneratorExit, KeyboardInterrupt)):
            raise exception
        self._failed = True
        if isinstance(exception, HackplException):
            self.log_fail(exception)
        else:
            explanation = exception_to_string(exception, default='')
            message = F'exception of type {exception.__class__.__name__}'
            if explanation and explanation != exception.__class__.__name__:
                message = F'{message}; {explanation}'
            self.log_fail(message)
        if self.log_debug():
            import traceback
            traceback.print_exc(file=sys.stderr)

    def _input(self) -> Iterator[buf]:
        source = self._source
        if source is None:
            return
        if isinstance(source, Unit):
            yield from source
        elif isinstance(source, list):
            yield from source
        else:
            data = source.read()
            if isinstance(data, str):
                data = data.encode(self.codec)
            yield data

    def _output(self) -> Iterator[buf]:
        for data in self._input():
            yield from self.act(data)

    def act(self, data: buf) -> Iterator[buf]:
        if self.args.reverse:
            it = self.reverse(data)
        else:
            it = self.process(data)
        if it is None:
            return
        if isinstance(it, (bytes, bytearray, memoryview)):
            it = (it,)
        yield from it

    def __iter__(self) -> Iterator[buf]:
        return self

    def __next__(self) -> buf:
        if self._chunks is None:
            self._chunks = self._output()
        try:
            return next(self._chunks)
        except StopIteration:
            raise
        except BaseException as B:
            self._chunks = iter(())
            self._exception_handler(B)
            raise StopIteration from B

    def reset(self):
        self._chunks = None
        if isinstance(self._source, Unit):
            self._source.reset()

    def __neg__(self) -> Unit:
        reversed = copy.copy(self)
        reversed.args.reverse = True
        return reversed

    def __ror__(self, stream: Unit | None | BinaryIO | str | buf | list[buf] | tuple[buf, ...]):
        if stream is None:
            return self
        if isinstance(stream, (list, tuple)):
            stream = [t.encode(self.codec) if isinstance(t, str) else t for t in stream]
        elif not isstream(stream) and not isinstance(stream, Unit):
            if isinstance(stream, str):
                stream = stream.encode(self.codec)
            stream = MemoryFile(cast(buf, stream))
        self._source = stream
        self.reset()
        return self

    def __str__(self):
        return self | str

    def __bytes__(self):
        return self | bytes

    def __or__(self, stream):
        def get_converter(it: Iterable):
            c = one(it)
            if ... is c:
                def identity(x):
                    return x
                return identity
            if isinstance(c, type) and issubclass(c, str):
                def decoder(v):
                    return v if isinstance(v, str) else bytes(v).decode(self.codec)
                return decoder
            if isinstance(c, type):
                def converter(v):
                    return v if isinstance(v, c) else c(v)
                return converter
            return c

        if stream is None:
            for _ in self:
                pass
            return
        if isinstance(stream, type) and issubclass(stream, Entry):
            stream = cast(Type[Unit], stream)()
        if stream is ...:
            def _id(c):
                return c
            stream = _id
        if isinstance(stream, Entry):
            assert isinstance(stream, Unit)
            return stream.__copy__().__ror__(self)
        elif isinstance(stream, list):
            converter = get_converter(stream)
            return [converter(chunk) for chunk in self]
        elif isinstance(stream, (bytearray, memoryview)):
            with MemoryFile(stream) as stdout:
                stdout.seekset(len(stream))
                return (self | stdout).getvalue()
        elif callable(stream):
            with MemoryFile(bytearray()) as stdout:
                _ = self | stdout
                out = stdout.getvalue()
            if isinstance(stream, type) and isinstance(out, stream):
                return out
            if isinstance(stream, type) and issubclass(stream, str):
                return out.decode(self.codec)
            return stream(out)

        stream = cast(BinaryIO, stream)
        if not stream.writable():
            raise ValueError('target stream is not writable')
        self._target = stream

        for chunk in self:
            try:
                stream.write(chunk)
                stream.flush()
            except AttributeError:
                pass
            except (BrokenPipeError, OSError) as E:
                self.log_debug(F'cannot send to output: {E}')
                break

        return stream

    def __call__(self, data: buf | None = None) -> buf:
        return data | self | bytearray()

    @classmethod
    def log_fail(cls, *messages) -> bool:
        """
        Log the message if and only if the current log level is at least `hackpl.lib.environment.LogLevel.ERROR`.
        """
        rv = cls.logger.isEnabledFor(LogLevel.ERROR)
        if rv and messages:
            cls.logger.error(cls._format(*messages))
        return rv

    @classmethod
    def log_warn(cls, *messages) -> bool:
        """
        Log the message if and only if the current log level is at least `hackpl.lib.environment.LogLevel.WARN`.
        """
        rv = cls.logger.isEnabledFor(LogLevel.WARNING)
        if rv and messages:
            cls.logger.warning(cls._format(*messages))
        return rv

    @classmethod
    def log_info(cls, *messages) -> bool:
        """
        Log the message if and only if the current log level is at least `hackpl.lib.environment.LogLevel.INFO`.
        """
        rv = cls.logger.isEnabledFor(LogLevel.INFO)
        if rv and messages:
            cls.logger.info(cls._format(*messages))
        return rv

    @classmethod
    def log_debug(cls, *messages) -> bool:
        """
        Log the message if and only if the current log level is at least `hackpl.lib.environment.LogLevel.DEBUG`.
        """
        rv = cls.logger.isEnabledFor(LogLevel.DEBUG)
        if rv and messages:
            cls.logger.debug(cls._format(*messages))
        return rv

    @classmethod
    def _format(cls, *messages) -> str:
        def transform(message):
            if callable(message):
                message = message()
            if isinstance(message, Exception):
                message = exception_to_string(message)
            if isinstance(message, str):
                return message
            if isbuffer(message):
                message = bytes(message)
                pmsg = message.decode(cls.codec, 'surrogateescape')
                if not pmsg.isprintable():
                    pmsg = message.hex().upper()
                return pmsg
            return str(message)
        return ' '.join(transform(msg) for msg in messages)

    @classmethod
    def _interface(cls, argp: ArgumentParserWithKeywordHooks) -> ArgumentParserWithKeywordHooks:
        """
        Receives a reference to an argument parser. This parser will be used to parse the command
        line for this unit into the member variable called `args`.
        """
        base = argp.add_argument_group('generic options')

        base.set_defaults(reverse=False)
        base.add_argument('-h', '--help', action='help', help='Show this help message and exit.')
        base.add_argument('-Q', '--quiet', action='store_true', help='Disables all log output.')
        base.add_argument('-0', '--devnull', action='store_true', help='Do not produce any output.')
        base.add_argument('-v', '--verbose', action='count', default=0,
            help='Specify up to two times to increase log level.')

        if cls.is_reversible:
            base.add_argument('-R', '--reverse', action='store_true',
                help='Use the reverse operation.')

        for argument in reversed(cls._argument_specification.values()):
            try:
                _ = argp.add_argument @ argument
            except Exception as E:
                raise RuntimeError(F'Failed to queue argument: {argument!s}; {E!s}')

        return argp

    @classmethod
    def argparser(cls, **keywords):
        argp = ArgumentParserWithKeywordHooks(
            keywords, prog=cls.name, description=documentation(cls), add_help=False)
        return cls._interface(argp)

    @classmethod
    def assemble(cls, *_args: str, **keywords):
        """
        Creates a unit from the given arguments and keywords. The given keywords are used to
        overwrite any previously specified defaults for the argument parser of the unit, then this
        modified parser is used to parse the given list of arguments as though they were given on
        the command line. The parser results are used to construct an instance of the unit, this
        object is consequently returned.
        """
        argp = cls.argparser(**keywords)
        args = argp.parse_args_with_keywords(_args)

        try:
            unit = autoinvoke(cls, dict(args.__dict__))
        except ValueError as E:
            argp.error(str(E))
        else:
            unit.args.quiet = args.quiet
            unit.args.reverse = args.reverse
            unit.args.devnull = args.devnull
            unit.args.verbose = args.verbose

            if args.quiet:
                unit.log_level = LogLevel.NONE
            else:
                unit.log_level = args.verbose

            return unit

    def __copy__(self):
        cls = self.__class__
        clone: Unit = cls.__new__(cls)
        clone.__dict__.update(self.__dict__)
        clone._target = None
        clone._chunks = None
        clone.args = copy.copy(self.args)
        return clone

    def __init__(self, **keywords):
        self._source = None
        self._target = None
        self._chunks = None
        self._failed = False
        self.console = False

        for key, value in dict(
            reverse=False,
            devnull=False,
            verbose=0,
            quiet=False,
        ).items():
            keywords.setdefault(key, value)
        self.args = Namespace(**keywords)
        self.log_detach()

    @classmethod
    def run(cls, argv=None, stream=None) -> None:
        """
        Implements command line execution. As `hackpl.units.Unit` is an `hackpl.units.Executable`,
        this method will be executed when a class inheriting from `hackpl.units.Unit` is defined
        in the current `__main__` module. The process exits with status code 1 when processing the
        input failed.
        """
        argv = argv if argv is not None else sys.argv[1:]

        if stream is None:
            stream = open(os.devnull, 'rb') if sys.stdin.isatty() else sys.stdin.buffer

        with stream as source:
            try:
                unit = cls.assemble(*argv)
            except ArgparseError as ap:
                ap.parser.error_commandline(str(ap))
                return
            except Exception as msg:
                cls.logger.critical(cls._format('initialization failed:', msg))
                sys.exit(1)

            loglevel = environment.verbosity.value
            if loglevel:
                unit.log_level = loglevel

            unit.console = True

            try:
                stream = open(os.devnull, 'wb') if unit.args.devnull else sys.stdout.buffer
                with stream as output:
                    _ = source | unit | output
            except ArgumentTypeError as E:
                unit.logger.error(F'delayed argument initialization failed: {E!s}')
                sys.exit(1)
            except KeyboardInterrupt:
                unit.logger.warning('aborting due to keyboard interrupt')
            except OSError:
                pass

            if unit.failed:
                sys.exit(1)
