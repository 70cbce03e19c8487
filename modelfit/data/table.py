"""
A table of raw (string) values read from a CSV file, with conversion of
rows and columns to numbers for use as training data.

Non-numeric values are assigned a numeric alias the first time they are
converted. Within each column the first distinct non-numeric value is
aliased to 0, the next to 1, and so on. Aliases are kept per column, so
the same string can have different aliases in different columns. Use
:meth:`DataTable.set_alias` to choose an alias explicitly.
"""
import csv
import logging
import numbers

import numpy


_logger_name = __name__.rsplit('.', 1)[-1]
logger = logging.getLogger(_logger_name)

BLANK_COLUMN_NAME = "<blank>"
MISSING_VALUE = "?"


class DataTable:
    """ A table of string values with numeric aliasing """

    def __init__(self, column_names=None):
        """
        Parameters
        ----------
        column_names: list of str, default=None
            If given, the table starts with these (and this many) columns

        """
        self.clear()

        if column_names is not None:
            self.column_names = column_names

    def __repr__(self):
        return "<DataTable n_rows={}, n_cols={}>".format(
            self.n_rows, self.n_cols)

    def clear(self):
        self._rows = []
        self._n_cols = 0
        self._column_names = []

        # (column index, raw value) -> alias
        self._aliases = {}

        # The next automatic alias of each column
        self._next_alias = []

    @property
    def n_rows(self):
        return len(self._rows)

    @property
    def n_cols(self):
        return self._n_cols

    @property
    def has_header(self):
        return len(self._column_names) > 0

    @property
    def column_names(self):
        return list(self._column_names)

    @column_names.setter
    def column_names(self, names):
        names = [str(name) for name in names]

        if self._n_cols > 0 and len(names) != self._n_cols:
            msg = "{} column names given for a table with {} columns"
            raise ValueError(msg.format(len(names), self._n_cols))

        self._column_names = names
        self._set_width(len(names))

    def _set_width(self, n_cols):
        if self._n_cols == 0:
            self._n_cols = n_cols
            self._next_alias = [0.0] * n_cols

    def column_index(self, name):
        """ The index of the named column, or -1 if there is no such column
        """
        try:
            return self._column_names.index(name)
        except ValueError:
            return -1

    def _resolve_column(self, column):
        """ Column index from an index or a name; None if out of range """
        if isinstance(column, str):
            index = self.column_index(column)
            if index < 0:
                logger.error("No column named {!r}".format(column))
                return None
            return index

        if (isinstance(column, numbers.Integral) and
                not isinstance(column, bool) and 0 <= column < self._n_cols):
            return int(column)

        msg = "Column index {} is out of bounds for a table with {} columns"
        logger.error(msg.format(column, self._n_cols))
        return None

    def _is_row(self, row):
        if (isinstance(row, numbers.Integral) and
                not isinstance(row, bool) and 0 <= row < self.n_rows):
            return True

        msg = "Row index {} is out of bounds for a table with {} rows"
        logger.error(msg.format(row, self.n_rows))
        return False

    ##################################################################
    # Raw values

    def add_raw_row(self, row):
        """ Append a row of values. The first row added to an empty table
        sets its width; later rows must match it.

        Returns
        -------
        success: bool

        """
        row = [str(value) for value in row]

        if len(row) == 0:
            return False

        self._set_width(len(row))

        if len(row) != self._n_cols:
            msg = "Cannot add a row with {} columns to a table with {} columns"
            logger.error(msg.format(len(row), self._n_cols))
            return False

        self._rows.append(row)
        return True

    def get_raw_row(self, row):
        """ A copy of the row's string values, or None if out of range """
        if not self._is_row(row):
            return None
        return list(self._rows[row])

    def get_raw_column(self, column):
        """ The column's string values, or None if there is no such column.
        `column` is an index or a column name.
        """
        index = self._resolve_column(column)
        if index is None:
            return None
        return [row[index] for row in self._rows]

    ##################################################################
    # Numeric values

    def _to_number(self, value, index):
        key = (index, value)

        if key in self._aliases:
            return self._aliases[key]

        try:
            return float(value)
        except ValueError:
            alias = self._next_alias[index]
            self._next_alias[index] = alias + 1.0
            self._aliases[key] = alias
            return alias

    def get_numeric_row(self, row):
        """ The row's values converted to numbers, or None if out of range
        """
        if not self._is_row(row):
            return None

        return numpy.array([self._to_number(value, index)
                            for index, value in enumerate(self._rows[row])])

    def get_numeric_column(self, column):
        """ The column's values converted to numbers, or None if there is no
        such column. `column` is an index or a column name.
        """
        index = self._resolve_column(column)
        if index is None:
            return None

        return numpy.array([self._to_number(row[index], index)
                            for row in self._rows])

    def set_alias(self, value, alias, column):
        """ Use `alias` as the numeric value of the string `value` in the
        given column, replacing any existing alias
        """
        index = self._resolve_column(column)
        if index is None:
            return False

        self._aliases[(index, str(value))] = float(alias)
        return True

    def get_alias_value(self, value, column):
        """ The alias of the string `value` in the given column, or None if
        it has not been aliased
        """
        index = self._resolve_column(column)
        if index is None:
            return None

        alias = self._aliases.get((index, str(value)))

        if alias is None:
            msg = "The value {!r} has no alias in column {}"
            logger.warning(msg.format(value, column))

        return alias

    def training_columns(self, predictor, response):
        """ The numeric values of the predictor and response columns

        Returns
        -------
        x, y: ndarray, shape=(n_rows,)

        Raises
        ------
        KeyError
            If either column does not exist

        """
        x = self.get_numeric_column(predictor)
        y = self.get_numeric_column(response)

        if x is None or y is None:
            msg = "Unknown column(s): predictor={!r}, response={!r}"
            raise KeyError(msg.format(predictor, response))

        return x, y

    ##################################################################
    # Persistence

    @classmethod
    def read_csv(cls, filename, header=True):
        """ Read a table from a comma delimited file

        Field values are stripped of surrounding whitespace and quotes.
        Blank lines are skipped, as are rows with a missing (`?`) value.

        Parameters
        ----------
        filename: str

        header: bool, default=True
            Whether the first line holds the column names. Blank names are
            replaced by "<blank>".

        Raises
        ------
        OSError
            If the file cannot be read

        ValueError
            If a row has a different number of columns than the first

        """
        table = cls()

        try:
            with open(filename, 'r', newline='') as f:
                lines = list(csv.reader(f, skipinitialspace=True))
        except OSError as e:
            msg = "Unable to read table from {}: {}"
            logger.error(msg.format(filename, e))
            raise

        n_discarded = 0

        for line_number, fields in enumerate(lines, start=1):
            fields = [field.strip().strip('"\'').strip() for field in fields]

            if not any(fields):
                continue

            if header and not table.has_header:
                table.column_names = [field or BLANK_COLUMN_NAME
                                      for field in fields]
                continue

            if MISSING_VALUE in fields:
                n_discarded += 1
                continue

            if not table.add_raw_row(fields):
                msg = ("Line {} of {} has {} columns but the table has {}")
                raise ValueError(msg.format(line_number, filename,
                                            len(fields), table.n_cols))

        if n_discarded:
            msg = "Discarded {} rows with missing values from {}"
            logger.info(msg.format(n_discarded, filename))

        return table

    def write_csv(self, filename):
        """ Write the table, with its header if it has one, as comma
        delimited text

        Raises
        ------
        OSError
            If the file cannot be written

        """
        try:
            with open(filename, 'w', newline='') as f:
                writer = csv.writer(f)
                if self.has_header:
                    writer.writerow(self._column_names)
                writer.writerows(self._rows)
        except OSError as e:
            msg = "Unable to write table to {}: {}"
            logger.error(msg.format(filename, e))
            raise
