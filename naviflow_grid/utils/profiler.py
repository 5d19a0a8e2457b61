"""
Profiling utilities for naviflow_grid.

Tracks wall and CPU time per named section, step counters, memory usage and
pressure-solver statistics of a fluid solver.
"""

import platform
import time
from datetime import datetime

import psutil


class Profiler:
    """
    Profiler class for tracking performance metrics.

    Sections are timed with ``start_section``/``end_section`` pairs and
    accumulate across calls, so one profiler spans a whole simulation.
    """

    def __init__(self, solver_name, resolution=None):
        """
        Initialize the profiler.

        Parameters:
        -----------
        solver_name : str
            Name of the solver being profiled
        resolution : tuple of int, optional
            Grid resolution, recorded with the system information
        """
        self.solver_name = solver_name
        self.resolution = tuple(resolution) if resolution is not None else None
        self._process = psutil.Process()
        self.initialize()

    def initialize(self):
        """Initialize profiling data structures."""
        self._start_time = None
        self._start_cpu_time = None
        self._sections = {}
        self.profiling_data = {
            "total_time": 0.0,
            "cpu_time": 0.0,
            "frames": 0,
            "sub_steps": 0,
            "memory_usage": [],
            "sections": {},
            "timestamp": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            "system_info": {
                "platform": platform.platform(),
                "processor": platform.processor(),
                "python_version": platform.python_version(),
                "memory_total": psutil.virtual_memory().total / (1024 ** 3),  # GB
            },
            "pressure_solver_info": {
                "name": None,
                "total_inner_iterations": 0,
                "avg_inner_iterations_per_solve": 0.0,
                "max_inner_iterations": 0,
                "inner_iterations_history": [],
                "convergence_rate": None,
                "last_residual": None,
                "unconverged_solves": 0,
            },
        }

    def start(self):
        """Start profiling."""
        self._start_time = time.time()
        self._start_cpu_time = time.process_time()

    def end(self):
        """End profiling and accumulate total time."""
        if self._start_time is not None:
            self.profiling_data["total_time"] += time.time() - self._start_time
            self.profiling_data["cpu_time"] += time.process_time() - self._start_cpu_time
            self._start_time = None
            self._start_cpu_time = None

    def start_section(self, section_name):
        """Start timing a section."""
        self._sections[section_name] = (time.time(), time.process_time())

    def end_section(self, section_name):
        """
        End timing a section and add to its counters.

        Parameters:
        -----------
        section_name : str
            Name of the section being timed
        """
        started = self._sections.pop(section_name, None)
        if started is None:
            return
        elapsed_wall = time.time() - started[0]
        elapsed_cpu = time.process_time() - started[1]
        section = self.profiling_data["sections"].setdefault(
            section_name, {"wall_time": 0.0, "cpu_time": 0.0, "calls": 0})
        section["wall_time"] += elapsed_wall
        section["cpu_time"] += elapsed_cpu
        section["calls"] += 1

    def section_time(self, section_name):
        """Accumulated wall time of a section, 0.0 if it never ran."""
        return self.profiling_data["sections"].get(section_name, {}).get("wall_time", 0.0)

    def count_frame(self, sub_steps):
        self.profiling_data["frames"] += 1
        self.profiling_data["sub_steps"] += sub_steps

    def sample_memory(self):
        """Record the resident set size of the current process in MB."""
        rss = self._process.memory_info().rss / (1024 ** 2)
        self.profiling_data["memory_usage"].append(rss)
        return rss

    def set_pressure_solver_info(self, solver_name, solver_info, last_result=None):
        """
        Record pressure solver statistics.

        Parameters:
        -----------
        solver_name : str
            Name of the pressure solver
        solver_info : dict
            Output of the linear solver's ``get_solver_info``
        last_result : LinearSolveResult, optional
            Result of the most recent pressure solve
        """
        info = self.profiling_data["pressure_solver_info"]
        history = list(solver_info.get("inner_iterations_history", []))
        info["name"] = f"{solver_name}/{solver_info.get('name')}"
        info["inner_iterations_history"] = history
        info["total_inner_iterations"] = sum(history)
        if history:
            info["avg_inner_iterations_per_solve"] = sum(history) / len(history)
            info["max_inner_iterations"] = max(history)
        info["convergence_rate"] = solver_info.get("convergence_rate")
        if last_result is not None:
            info["last_residual"] = last_result.residual
            if not last_result.converged:
                info["unconverged_solves"] += 1

    def summary(self):
        """Flat overview of the collected timings."""
        data = self.profiling_data
        sub_steps = data["sub_steps"]
        return {
            "solver": self.solver_name,
            "resolution": self.resolution,
            "frames": data["frames"],
            "sub_steps": sub_steps,
            "total_time": data["total_time"],
            "cpu_time": data["cpu_time"],
            "avg_time_per_sub_step": data["total_time"] / sub_steps if sub_steps > 0 else 0.0,
            "section_times": {name: s["wall_time"] for name, s in data["sections"].items()},
            "peak_memory_mb": max(data["memory_usage"]) if data["memory_usage"] else None,
            "pressure_solver": dict(data["pressure_solver_info"]),
        }
