#!/usr/bin/env python
"""Stream filters for reading text input and writing progress messages.

Filters wrap a stream and process each unit of data as it passes through.
They may be composed by wrapping one around another.

Readers:

    :class:`AbstractReader`
        Base class for all readers. Subclass and override
        :py:meth:`~AbstractReader.filter`

    :class:`SkipBlankReader`
        Skip blank lines in a text stream

Writers:

    :class:`AbstractWriter`
        Base class for all writers. Subclass and override
        :py:meth:`~AbstractWriter.filter`

    :class:`ColorWriter`
        Color text if and only if the output stream supports ANSI color

    :class:`NameDateWriter`
        Prepend a program name, date, and time to each line written. Used by
        every command-line script in :data:`txfrag` to report progress on
        :obj:`sys.stderr`

And one convenience function:

    :func:`colored`
        Colorize text (via :func:`termcolor.colored`) if and only
        if color is supported by :obj:`sys.stderr`


Examples
--------
Read a file, skipping blank lines::

    >>> reader = SkipBlankReader(open("some_file.txt"))
    >>> for line in reader:
    >>>     pass # do something with each line

Report progress::

    >>> printer = NameDateWriter("tx_fragments")
    >>> printer.write("Opened 3 alignment files.")
"""
import sys
import datetime
from abc import abstractmethod
from io import IOBase

import termcolor

if hasattr(sys.stderr, "isatty") and sys.stderr.isatty():
    colored = termcolor.colored
else:
    colored = lambda x, **kwargs: str(x)


#===============================================================================
# INDEX: readers
#===============================================================================

class AbstractReader(IOBase):
    """Abstract base class for stream-reading filters

    Create a filter by subclassing this, and defining `self.filter()`

    Parameters
    ----------
    stream : file-like
        Input data
    """

    def __init__(self, stream):
        self.stream = stream

    def isatty(self):
        return hasattr(self.stream, "isatty") and self.stream.isatty()

    def writable(self):
        return False

    def seekable(self):
        return False

    def readable(self):
        return True

    def __next__(self):
        return self.filter(next(self.stream))

    def __iter__(self):
        return self

    def read(self):
        """Process all remaining units of data, assuming they are string-like

        Returns
        -------
        str
        """
        return "".join(self.readlines())

    def readline(self):
        """Process a single unit of data. ``next(self)`` is more likely
        to behave as expected.
        """
        return self.filter(self.stream.readline())

    def readlines(self):
        return list(self)

    def close(self):
        """Close stream"""
        try:
            self.stream.close()
        except AttributeError:
            pass

    @abstractmethod
    def filter(self, data):
        """Filter or process each unit of data. Override this in subclasses

        Parameters
        ----------
        data : unit of data
            Often a line of text

        Returns
        -------
        object
            processed data
        """
        pass


class SkipBlankReader(AbstractReader):
    """Ignores blank/whitespace-only lines in a text stream"""

    def filter(self, line):
        if len(line.strip()) == 0:
            return self.__next__()
        else:
            return line


#===============================================================================
# INDEX: writers
#===============================================================================

class AbstractWriter(IOBase):
    """Abstract base class for stream-writing filters.
    Create a filter by subclassing this, and defining self.filter().

    Parameters
    ----------
    stream : file-like, open for writing
        Output stream to which filtered/formatted data will be written
    """

    def __init__(self, stream):
        self.stream = stream

    def isatty(self):
        return hasattr(self.stream, "isatty") and self.stream.isatty()

    def writable(self):
        return True

    def seekable(self):
        return False

    def readable(self):
        return False

    def write(self, data):
        """Filter `data` and write it to `self.stream`"""
        self.stream.write(self.filter(data))

    def flush(self):
        self.stream.flush()

    def close(self):
        """Flush and close `self.stream`"""
        try:
            self.flush()
            self.stream.close()
        except (AttributeError, ValueError):
            pass

    @abstractmethod
    def filter(self, data):
        """Filter or format each unit of data before it is written.
        Override this in subclasses
        """
        pass


class ColorWriter(AbstractWriter):
    """Detect whether output stream supports color, and enable/disable colored output

    Parameters
    ----------
    stream : file-like
        Stream to write to (Default: :obj:`sys.stderr`)
    """

    def __init__(self, stream=None):
        stream = sys.stderr if stream is None else stream
        AbstractWriter.__init__(self, stream)
        if hasattr(self.stream, "isatty") and self.stream.isatty():
            self.color = termcolor.colored

    def color(self, text, **kwargs):
        """Color `text` with attributes in `kwargs` if `stream` supports ANSI color.
        See :func:`termcolor.colored` for usage.
        """
        return text

    def filter(self, data):
        return data


class NameDateWriter(ColorWriter):
    """Prepend program name, date, and time to each line of output

    Parameters
    ----------
    name : str
        Name to prepend

    line_delimiter : str, optional
        Delimiter, appended to lines. (Default `'\\n'`)

    stream : file-like
        Stream to write to (Default: :obj:`sys.stderr`)
    """

    def __init__(self, name, line_delimiter="\n", stream=None):
        ColorWriter.__init__(self, stream=stream)
        self.name = name
        self.delimiter = line_delimiter
        self.fmtstr = "%s %s%s %s%s: {2}%s" % (
            self.color(name, color="blue", attrs=["bold"]),
            self.color("[", color="blue", attrs=["bold"]),
            self.color("{0}", color="green"),
            self.color("{1}", color="green", attrs=["bold"]),
            self.color("]", color="blue", attrs=["bold"]),
            self.delimiter,
        )

    def filter(self, line):
        """Prepend date and time to `line`

        Parameters
        ----------
        line : str
            Input

        Returns
        -------
        str : Input with name, date, and time prepended
        """
        now = datetime.datetime.now()
        d = now.strftime("%Y-%m-%d")
        t = now.strftime("%H:%M:%S")
        return self.fmtstr.format(d, t, line.strip(self.delimiter))

    def __call__(self, line):
        self.write(line)
