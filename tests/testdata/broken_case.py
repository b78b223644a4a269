def broken(:
    is_.true(1 == 2)  # never indexed
