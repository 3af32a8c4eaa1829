"""Parameter types shared by the database backends."""

Params = tuple | list | dict
ParamsList = list[tuple] | list[list]
