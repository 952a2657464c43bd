# finance_frontend/forms.py


def index_of(options, value, default=0):
    return options.index(value) if value in options else default


def options_with_current(options, current):
    """
    Selectbox options that still offer a record's stored value.

    Categories are free text and imports accept any currency code, so a
    stored value may be missing from the lookup list; without it the form
    would preselect another option and overwrite the field on save.
    """
    options = list(options)
    if current and current not in options:
        options.append(current)
    return options
