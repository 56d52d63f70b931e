# tanksim

`tanksim` organises battles between tank algorithms on toroidal grid maps. The
package has two tournament modes:

* **comparative** (`tanksim.comparative.ComparativeMode`): one map and two
  algorithms, played under every registered game manager. Game managers that
  produce the same outcome (winner, reason, rounds and final board) are
  grouped together.
* **competition** (`tanksim.competition.CompetitionMode`): one game manager
  and several algorithms, paired on every map. The result is a score table.

It also has the building blocks a tank algorithm works with:

* `tanksim.worldview`: `WorldView` (a wrapping grid of cell masks, danger
  costs and shell arrival times), `CellMask`, `Cell`, `TankLocal` and `RoleTag`.
* `tanksim.teamstate`: `TeamState`, which holds move reservations and
  shot lanes shared by the tanks of one team.
* `tanksim.orders`: `BattleInfoLite` (a per-tick order with a script of up
  to four `PlanStep`s) and `Plan`.
* `tanksim.directions`: `Direction`, `ActionRequest`, and helpers such as
  `direction_from_offset`, `bijection` and `inverse_bijection`.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Map files

```
Some description of the map
MaxSteps = 5000
NumShells = 20
Rows = 4
Cols = 10
#### #####
#1   @  2#
#        #
##########
```

The first line is free text. Four `key = value` lines follow, in this order,
with keys matched without regard to case: `MaxSteps`, `NumShells`, `Rows`,
`Cols`. `Rows` and `Cols` must each be at least 1. The grid comes next. It may
contain space, `#` (wall), `@` (mine), `1` and `2` (tanks of player 1 and
player 2). Short or missing lines are padded with spaces, and columns past
`Cols` are ignored. Any other character, a missing or malformed parameter
line, or an unreadable file raises `tanksim.battlefield.MapError`.

`tanksim.battlefield.parse_battlefield_file` returns a `ParsedMap`.
`InitialSatellite` serves the starting board cell by cell through
`get_object_at(x, y)`. `satellite_to_string` renders any such view as text.

## Registering algorithms and game managers

The modes keep factories in registrars (`tanksim.registrars.AlgorithmRegistrar`
and `GameManagerRegistrar`). By default the process-wide ones are used:
`get_algorithm_registrar()` and `get_game_manager_registrar()`. A mode opens
an entry named after the plugin file's stem and then calls a *loader* with
the file's path. The loader registers factories on the open entry:

```python
from tanksim.registrars import register_player, register_tank_algorithm, register_game_manager

register_player(lambda player_index, width, height, max_steps, num_shells: MyPlayer(...))
register_tank_algorithm(lambda player_index, tank_index: MyTank(...))
register_game_manager(lambda verbose: MyGameManager(...))
```

An algorithm entry needs both a player factory and a tank algorithm factory.
A game manager entry needs its factory. If one is missing, validation raises
`AlgorithmRegistrationError` or `GameManagerRegistrationError`.

A game manager object must have a method
`run(width, height, map, map_name, max_steps, num_shells, player1, player1_name, player2, player2_name, tank_factory1, tank_factory2)`.
It must return a `tanksim.game.GameResult`, and may set `game_state` to a view
of the final board.

## Running a tournament from Python

Plugin files are the `.py` files in the folders or paths named on the command
line. The files must exist. What loading a file means is up to the loader you
pass in:

```python
from pathlib import Path
from tanksim.cli import parse_cli
from tanksim.runner import create_mode, run_all_games, write_mode_results

installers = {"Algorithm_a": install_a, "Algorithm_b": install_b, "GameManager_x": install_x}

def loader(path):
    return installers[Path(path).stem]()   # each installer calls the register_* functions

cli, bad = parse_cli(["-comparative", "game_map=maps/m1.txt", "game_managers_folder=gms",
                      "algorithm1=algos/Algorithm_a.py", "algorithm2=algos/Algorithm_b.py"])
mode, maps = create_mode(cli)
mode.open_plugins(cli, loader)
jobs = mode.get_all_games(maps)
run_all_games(mode, jobs, cli.verbose)     # or run_threads(mode, jobs, n, cli.verbose)
write_mode_results(mode, cli)
```

The results files are written as follows:

* Comparative mode writes `comparative_results_<ms>.txt` into the game
  managers folder. Each outcome group lists its winner, reason and round
  count, the managers that produced it (sorted), and the final board.
* Competition mode writes `competition_<ms>.txt` into the algorithms folder.
  A win earns 3 points, and a tie earns 1 point for each side. The table is
  sorted by score, highest first, then by name. If the file cannot be
  created, the table is printed to standard output.

## The `tanksim` command

```
tanksim -comparative game_map=<file> game_managers_folder=<dir> algorithm1=<plugin> algorithm2=<plugin> [num_threads=<n>] [-verbose]
tanksim -competition game_maps_folder=<dir> game_manager=<plugin> algorithms_folder=<dir> [num_threads=<n>] [-verbose]
```

The command parses and checks these arguments. On unknown arguments, a missing
mode or key, a bad `num_threads`, or missing files or folders, it prints a
usage message and exits with status 1.

## What the package does not do

The package contains no game manager and no tank algorithm. It does not play
battles itself: `run_single_game` hands each game to a registered game
manager. The `tanksim` command also has no way to load plugin files from
disk. It knows no plugins, so plugin loading fails and the command exits with
status 1. To run a tournament, use the Python API above with your own loader.